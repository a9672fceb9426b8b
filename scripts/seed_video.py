#!/usr/bin/env python3
"""
Development script to add or remove a video for sensitivity analysis.

Uploads a local file to the videos bucket and inserts a ``pending`` record
pointing at it. The record can then be processed through the API or with
``scripts/reprocess_videos.py``.

Usage:
    python scripts/seed_video.py FILE --owner USER_ID [--title TITLE] [--process]
    python scripts/seed_video.py --remove VIDEO_ID

Options:
    --owner     User who owns the video and receives its events
    --title     Title stored on the record (defaults to the file name)
    --process   Run the pipeline in this process right after seeding
    --remove    Delete the record and its object instead of seeding
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.api.dependencies import build_pipeline_services  # noqa: E402
from src.commons.settings.loader import get_settings  # noqa: E402
from src.domain.exceptions import PipelineRunError  # noqa: E402
from src.domain.models.video import VideoRecord  # noqa: E402
from src.domain.value_objects.storage_location import RemoteStorage  # noqa: E402
from src.infrastructure.factory import InfrastructureFactory  # noqa: E402


@dataclass
class SeedArgs:
    """Parsed command line arguments."""

    file: Path | None
    owner: str | None
    title: str | None
    process: bool
    remove: str | None


def parse_args(argv: list[str] | None = None) -> SeedArgs:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Seed or remove a development video",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("file", nargs="?", type=Path, help="Local video file")
    parser.add_argument("--owner", help="Owning user id")
    parser.add_argument("--title", help="Record title")
    parser.add_argument(
        "--process",
        action="store_true",
        help="Run the pipeline after seeding",
    )
    parser.add_argument("--remove", metavar="VIDEO_ID", help="Video to delete")
    args = parser.parse_args(argv)

    if args.remove is None:
        if args.file is None or args.owner is None:
            parser.error("FILE and --owner are required when seeding")
        if not args.file.is_file():
            parser.error(f"not a file: {args.file}")

    return SeedArgs(
        file=args.file,
        owner=args.owner,
        title=args.title,
        process=args.process,
        remove=args.remove,
    )


async def seed(factory: InfrastructureFactory, args: SeedArgs) -> VideoRecord:
    """Upload the file and insert a pending record for it."""
    assert args.file is not None and args.owner is not None
    settings = factory.settings
    bucket = settings.blob_storage.videos_bucket

    video_id = str(uuid4())
    record = VideoRecord(
        id=video_id,
        owner_id=args.owner,
        title=args.title or args.file.stem,
        original_name=args.file.name,
        size_bytes=args.file.stat().st_size,
        storage=RemoteStorage(
            bucket=bucket,
            key=f"{args.owner}/{video_id}{args.file.suffix}",
        ),
    )

    content_type = mimetypes.guess_type(args.file.name)[0] or "video/mp4"
    with args.file.open("rb") as f:
        size = await factory.get_blob_storage().upload(
            bucket, record.storage.key, f, content_type
        )
    print(f"  Uploaded {size} bytes to {record.storage.uri}")

    await factory.get_document_db().insert(
        settings.document_db.collections.videos,
        record.model_dump(mode="json"),
    )
    print(f"  Inserted record {record.id} (owner {record.owner_id})")
    return record


async def remove(factory: InfrastructureFactory, video_id: str) -> bool:
    """Delete a record, its object and its cached views."""
    services = build_pipeline_services(factory)
    record = await services.record_store.load(video_id)

    if isinstance(record.storage, RemoteStorage):
        existed = await factory.get_blob_storage().delete(
            record.storage.bucket, record.storage.key
        )
        outcome = "deleted" if existed else "missing"
        print(f"  Object {record.storage.uri}: {outcome}")

    deleted = await factory.get_document_db().delete(
        factory.settings.document_db.collections.videos, video_id
    )
    await services.cache_invalidation.invalidate(video_id)
    await services.cache_invalidation.invalidate_owner_views(record.owner_id)
    print(f"  Record {video_id}: {'deleted' if deleted else 'missing'}")
    return deleted


async def run(args: SeedArgs) -> int:
    """Execute the requested action and return the exit code."""
    factory = InfrastructureFactory(get_settings())
    try:
        if args.remove is not None:
            return 0 if await remove(factory, args.remove) else 1

        record = await seed(factory, args)
        if not args.process:
            return 0

        services = build_pipeline_services(factory)
        try:
            result = await services.orchestrator.run(record.id)
        except PipelineRunError as e:
            print(f"  Processing failed: {e}")
            return 1
        if result is not None:
            print(f"  Result: {result.status.value} ({result.confidence:.2f})")
        return 0
    finally:
        await factory.close_all()


def main() -> None:
    """Main entry point."""
    sys.exit(asyncio.run(run(parse_args())))


if __name__ == "__main__":
    main()
