"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Prefixed environment variables  (TODOLIST__SERVER__PORT=9000)
  2. Platform environment variables  (PORT, WIDGET_URL, RENDER_EXTERNAL_URL)
  3. todolist.yaml                   (searched in cwd, then platform config dir)
  4. Hardcoded defaults

The config file is optional and all fields have sensible defaults. The widget
URLs default to empty; the server still starts without them but cannot serve
the widget bundle.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

import platformdirs
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo

# Unprefixed variables set by hosting platforms, mapped to (section, field).
PLATFORM_ENV_VARS: dict[str, tuple[str, str]] = {
    "PORT": ("server", "port"),
    "WIDGET_URL": ("widget", "source_url"),
    "RENDER_EXTERNAL_URL": ("widget", "backend_url"),
}


def _find_config_file() -> str | None:
    """Return the path of the first todolist.yaml found, or None."""
    candidates = [
        Path("todolist.yaml"),
        Path(platformdirs.user_config_dir("todolist-app")) / "todolist.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    transport: Literal["stdio", "http"] = "http"
    host: str = "0.0.0.0"
    port: int = 8000


class WidgetSettings(BaseModel):
    source_url: str = ""  # Static site hosting the built widget bundle
    backend_url: str = ""  # Public origin of this server, used in the widget HTML
    cache_ttl_seconds: float = 60.0
    fetch_timeout_seconds: float = 10.0


class CorsSettings(BaseModel):
    allowed_origins: list[str] = ["https://chatgpt.com", "https://chat.openai.com"]


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class PlatformEnvSettingsSource(PydanticBaseSettingsSource):
    """Reads the bare variables that hosting platforms inject (see PLATFORM_ENV_VARS)."""

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        # Values are assembled per section in __call__
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        values: dict[str, dict[str, str]] = {}
        for env_name, (section, key) in PLATFORM_ENV_VARS.items():
            raw = os.environ.get(env_name)
            if raw:
                values.setdefault(section, {})[key] = raw
        return values


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: TODOLIST__SERVER__PORT=9090
        env_prefix="TODOLIST__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    widget: WidgetSettings = WidgetSettings()
    cors: CorsSettings = CorsSettings()
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
            env_settings,  # TODOLIST__ environment variables
            PlatformEnvSettingsSource(settings_cls),  # PORT, WIDGET_URL, RENDER_EXTERNAL_URL
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
