"""Settings loader with layered configuration support."""

import json
import os
from pathlib import Path
from typing import Any

from src.commons.settings.models import Settings

ENV_PREFIX = "VIDEO_SENTINEL__"
ENVIRONMENT_VAR = f"{ENV_PREFIX}APP__ENVIRONMENT"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def coerce_env_value(raw: str) -> Any:
    """Turn an environment string into bool, number, JSON or plain string."""
    lowered = raw.lower()
    if lowered in ("true", "false"):
        return lowered == "true"

    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            continue

    # Lists and tuples such as CLASSIFIER__KEYWORDS or confidence ranges
    if raw.startswith(("[", "{")):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    return raw


class SettingsLoader:
    """Builds a Settings instance from layered sources.

    Precedence, highest first:
    1. Explicit overrides passed to ``load``
    2. ``VIDEO_SENTINEL__*`` environment variables
    3. ``appsettings.{environment}.json``
    4. ``appsettings.json``
    """

    ENV_PREFIX = ENV_PREFIX

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
    ) -> None:
        self.config_dir = config_dir or Path("config")
        self.environment = environment or os.getenv(ENVIRONMENT_VAR, "dev")

    def load(self, overrides: dict[str, Any] | None = None) -> Settings:
        """Resolve every layer and validate the result.

        Args:
            overrides: Optional nested values applied on top of everything else.

        Returns:
            Validated Settings instance.
        """
        layers = [
            self._read_json("appsettings.json"),
            self._read_json(f"appsettings.{self.environment}.json"),
            self._environment_overrides(),
            overrides or {},
        ]

        config: dict[str, Any] = {}
        for layer in layers:
            config = deep_merge(config, layer)
        return Settings(**config)

    def _environment_overrides(self) -> dict[str, Any]:
        """Map ``VIDEO_SENTINEL__CACHE__URL=x`` to ``{"cache": {"url": x}}``."""
        result: dict[str, Any] = {}
        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue

            *parents, leaf = key[len(self.ENV_PREFIX) :].lower().split("__")
            node = result
            for part in parents:
                node = node.setdefault(part, {})
            node[leaf] = coerce_env_value(value)
        return result

    def _read_json(self, filename: str) -> dict[str, Any]:
        path = self.config_dir / filename
        if not path.exists():
            return {}
        with path.open(encoding="utf-8") as f:
            return dict(json.load(f))


_settings: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Get or create the global settings instance.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Force reload settings from files.

    Returns:
        Settings instance.
    """
    global _settings  # noqa: PLW0603
    if _settings is None or reload:
        loader = SettingsLoader(config_dir=config_dir, environment=environment)
        _settings = loader.load()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance. Useful for testing."""
    global _settings  # noqa: PLW0603
    _settings = None
