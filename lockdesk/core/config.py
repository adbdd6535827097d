"""Configuration management for lockdesk.

Configuration is a YAML (or TOML) file describing which server to talk to,
who the current user is and which permissions they hold. It is validated
with Pydantic models; :class:`ConfigManager` loads it and notifies
registered callbacks when it is reloaded, which is how the action bar picks
up a changed permission set without restarting.
"""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from lockdesk.security.permissions import Capability
from lockdesk.utils.errors import ConfigurationError
from lockdesk.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("config/lockdesk.yml")


class ServerSettings(BaseModel):
    """Where the lockable resources pages live."""

    base_url: str
    root_path: str = "lockable-resources"
    crumb_path: str = "crumbIssuer/api/json"
    username: Optional[str] = None
    api_token: Optional[str] = Field(default=None, repr=False)
    timeout: float = Field(default=10.0, gt=0)
    verify_tls: bool = True


class SessionSettings(BaseModel):
    """The user on whose behalf actions are sent."""

    user: Optional[str] = None
    permissions: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, value: Dict[str, bool]) -> Dict[str, bool]:
        normalised: Dict[str, bool] = {}
        for key, granted in value.items():
            try:
                capability = Capability.coerce(key)
            except ValueError:
                raise ValueError(f"Unknown permission {key!r}") from None
            normalised[capability.value] = granted
        return normalised


class UISettings(BaseModel):
    """Settings for the terminal UI."""

    theme: str = "dark"
    refresh_interval: float = Field(default=30.0, ge=5.0, description="Seconds")


class LoggingSettings(BaseModel):
    level: str = "INFO"
    log_dir: Optional[Path] = None


class LockDeskSettings(BaseModel):
    """Root configuration schema."""

    server: ServerSettings
    session: SessionSettings = Field(default_factory=SessionSettings)
    ui: UISettings = Field(default_factory=UISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class ConfigManager:
    """Load and reload the configuration file."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self.config_path = config_path or Path(os.environ.get("LOCKDESK_CONFIG", DEFAULT_CONFIG_PATH))
        self._settings: Optional[LockDeskSettings] = None
        self._callbacks: List[Callable[[LockDeskSettings], Awaitable[None]]] = []
        self._lock = asyncio.Lock()

    async def load(self) -> LockDeskSettings:
        """Load configuration from disk and validate it."""

        async with self._lock:
            logger.debug("loading configuration", extra={"path": str(self.config_path)})
            data = self._read_file(self.config_path)
            try:
                settings = LockDeskSettings(**data)
            except ValidationError as exc:
                raise ConfigurationError(str(exc)) from exc
            self._settings = settings
            return settings

    async def reload(self) -> LockDeskSettings:
        """Reload configuration and run the registered callbacks."""

        settings = await self.load()
        await self._notify(settings)
        return settings

    def register_callback(self, callback: Callable[[LockDeskSettings], Awaitable[None]]) -> None:
        """Register a coroutine callback executed after reloads."""

        self._callbacks.append(callback)

    async def get_settings(self) -> LockDeskSettings:
        """Return the last loaded settings, loading them if necessary."""

        if self._settings is None:
            return await self.load()
        return self._settings

    async def _notify(self, settings: LockDeskSettings) -> None:
        for callback in self._callbacks:
            try:
                await callback(settings)
            except Exception:
                logger.exception("configuration callback failed")

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise ConfigurationError(f"Configuration file {path} does not exist")
        if path.suffix in {".yml", ".yaml"}:
            with path.open("r", encoding="utf-8") as handle:
                try:
                    return yaml.safe_load(handle) or {}
                except yaml.YAMLError as exc:
                    raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
        if path.suffix == ".toml":
            import tomllib

            with path.open("rb") as handle:
                try:
                    return tomllib.load(handle)
                except tomllib.TOMLDecodeError as exc:
                    raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc
        raise ConfigurationError(f"Unsupported configuration format: {path.suffix}")


__all__ = [
    "ConfigManager",
    "LockDeskSettings",
    "ServerSettings",
    "SessionSettings",
    "UISettings",
    "LoggingSettings",
    "DEFAULT_CONFIG_PATH",
]
