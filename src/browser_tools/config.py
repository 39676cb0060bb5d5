"""Configuration models for browser tools."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BrowserConfig(BaseModel):
    """Settings used when a browser session is launched."""

    headless: bool = True
    viewport_width: int = 1280
    viewport_height: int = 720
    executable_path: Optional[Path] = None
    browser_type: str = Field(default="chromium", pattern="^(chromium|firefox|webkit)$")
    args: list[str] = Field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-dev-shm-usage",
        ]
    )
    default_timeout: Optional[float] = Field(
        default=None,
        description="Default timeout (in seconds) applied to every page action.",
    )
    wait_until: str = Field(default="domcontentloaded")
    auto_launch: bool = Field(
        default=True,
        description="Launch a session on demand when a command needs one.",
    )


class ServerConfig(BaseModel):
    """Settings for the HTTP tool service."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8765)


class ToolsConfig(BaseSettings):
    """Top-level configuration for the browser tools process."""

    model_config = SettingsConfigDict(
        env_prefix="BROWSER_TOOLS_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> ToolsConfig:
    """Load configuration from the environment, an optional file and overrides."""

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    config = ToolsConfig(**settings_kwargs)
    if not data:
        return config

    merged = config.model_dump(mode="python")
    _deep_update(merged, data)
    return ToolsConfig.model_validate(merged)


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> None:
    """Recursively merge ``updates`` into ``target`` in-place."""

    for key, value in updates.items():
        if (
            isinstance(value, Mapping)
            and isinstance(existing := target.get(key), Mapping)
        ):
            nested: dict[str, Any]
            if isinstance(existing, dict):
                nested = existing
            else:
                nested = dict(existing)
            _deep_update(nested, value)
            target[key] = nested
        else:
            target[key] = value
