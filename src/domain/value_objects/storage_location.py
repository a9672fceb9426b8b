"""Storage location value objects.

A video asset lives either on a local filesystem path or in a remote object
store bucket. Only remote assets can be handed to the external moderation
service, which reads directly from the bucket.

Examples:
    >>> LocalStorage(path="/data/uploads/clip.mp4").supports_remote_analysis()
    False
    >>> RemoteStorage(bucket="videos", key="u1/clip.mp4").uri
    's3://videos/u1/clip.mp4'
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class LocalStorage(BaseModel):
    """Asset stored on a path readable by this process."""

    model_config = ConfigDict(frozen=True)

    provider: Literal["local"] = "local"
    path: str = Field(min_length=1, description="Absolute or working-dir path")

    def supports_remote_analysis(self) -> bool:
        return False

    @property
    def uri(self) -> str:
        return self.path


class RemoteStorage(BaseModel):
    """Asset stored as an object in a bucket."""

    model_config = ConfigDict(frozen=True)

    provider: Literal["s3"] = "s3"
    bucket: str = Field(min_length=1)
    key: str = Field(min_length=1)

    def supports_remote_analysis(self) -> bool:
        return True

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


StorageLocation = Annotated[
    LocalStorage | RemoteStorage,
    Field(discriminator="provider"),
]
