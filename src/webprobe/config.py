"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (WEBPROBE__HTTP__TIMEOUT_SECONDS=5)
  2. webprobe.yaml          (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional — all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("webprobe")


def _find_config_file() -> str | None:
    """Return the path of the first webprobe.yaml found, or None."""
    candidates = [
        Path("webprobe.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "webprobe.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class HttpSettings(BaseModel):
    timeout_seconds: float = Field(default=30.0, gt=0)
    user_agent: str = "webprobe/1.0"
    follow_redirects: bool = True
    max_redirects: int = Field(default=20, ge=0)


class DisplaySettings(BaseModel):
    # Available width for image scaling, in pixels
    width: int = Field(default=800, gt=0)
    tick_interval_seconds: float = Field(default=0.05, gt=0)


class ActionSettings(BaseModel):
    random_image_side: int = Field(default=640, gt=0)
    httpbin_url: str = "https://httpbin.org/post"


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: WEBPROBE__DISPLAY__WIDTH=1024
        env_prefix="WEBPROBE__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    http: HttpSettings = HttpSettings()
    display: DisplaySettings = DisplaySettings()
    actions: ActionSettings = ActionSettings()
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
