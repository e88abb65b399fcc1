"""Jarvis configuration management.

Configuration sources (in priority order):
1. Config file (config.yaml)
2. Environment variables (JARVIS_ prefix, ``__`` for nesting)
3. Defaults
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from jarvis.models.api_key import ClientSource


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class DatabaseConfig(BaseModel):
    """Database configuration."""

    url: str = "sqlite+aiosqlite:///./jarvis.db"
    echo: bool = False


class RegistrationConfig(BaseModel):
    """Key registration policy."""

    # Sources whose keys are active without an email round-trip
    trusted_sources: list[ClientSource] = Field(
        default_factory=lambda: [ClientSource.IOS, ClientSource.ANDROID]
    )


class DeliveryConfig(BaseModel):
    """Delivery worker pool configuration."""

    workers: int = 4
    queue_size: int = 1000
    # Seconds to wait for queued tasks on shutdown before cancelling workers
    shutdown_timeout: float = 10.0

    deliverer: Literal["log", "webhook"] = "log"
    webhook_url: str | None = None


class NotificationConfig(BaseModel):
    """Confirmation code notification channel."""

    channel: Literal["log", "webhook"] = "log"
    webhook_url: str | None = None
    confirm_url_template: str = "http://localhost:8000/confirm/{code}"

    def confirm_url(self, code: str) -> str:
        return self.confirm_url_template.format(code=code)


class AdminConfig(BaseModel):
    """Admin dashboard credentials.

    Both must be set for the dashboard to accept any request.
    """

    username: str | None = None
    password: str | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.username) and bool(self.password)


class Settings(BaseSettings):
    """Jarvis application settings."""

    model_config = SettingsConfigDict(
        env_prefix="JARVIS_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    registration: RegistrationConfig = Field(default_factory=RegistrationConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)


def _load_config_file() -> dict:
    """Load configuration from YAML file if one exists.

    Looks for config file in order:
    1. JARVIS_CONFIG_FILE environment variable
    2. ./config.yaml
    3. /etc/jarvis/config.yaml
    """
    config_paths = [
        os.environ.get("JARVIS_CONFIG_FILE"),
        Path("config.yaml"),
        Path("/etc/jarvis/config.yaml"),
    ]

    for path in config_paths:
        if path is None:
            continue
        path = Path(path)
        if path.exists():
            with open(path) as f:
                return yaml.safe_load(f) or {}

    return {}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Keys set in the YAML file are passed as init kwargs and win over
    environment variables; everything else comes from the environment.
    """
    file_config = _load_config_file()
    return Settings(**file_config)
