"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (GRIMOIRE__CACHE__TTL_HOURS=12)
  2. grimoire.yaml          (searched in cwd, then ~/.config/grimoire/)
  3. Hardcoded defaults

The config file is optional — all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("grimoire")
_DEFAULT_INDEX_PATH = str(Path(_DEFAULT_DATA_DIR) / "index.json")


def _find_config_file() -> str | None:
    """Return the path of the first grimoire.yaml found, or None."""
    candidates = [
        Path("grimoire.yaml"),
        Path.home() / ".config" / "grimoire" / "grimoire.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class RegistrySettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    local_dir: str = "registries"
    # registry name → URL; fetch precedence follows insertion order
    remotes: dict[str, str] = {}


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    index_path: str = _DEFAULT_INDEX_PATH
    ttl_hours: int = 24


class FetcherSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_seconds: float = 10.0
    max_redirects: int = 3


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: GRIMOIRE__FETCHER__MAX_REDIRECTS=5
        env_prefix="GRIMOIRE__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    registry: RegistrySettings = RegistrySettings()
    cache: CacheSettings = CacheSettings()
    fetcher: FetcherSettings = FetcherSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
