"""
Configuration Models

Pydantic models for application configuration validation.
"""

import json
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from personasync.utils.kv_store import InMemoryStore, JsonFileStore, KeyValueStore


class StorageConfig(BaseModel):
    """Session store persistence configuration."""

    backend: Literal["memory", "file"] = "file"
    path: str = Field(default="data/session_store.json")
    current_user_key: str = Field(default="currentUser", min_length=1)
    user_prefix: str = Field(default="personasync_user_", min_length=1)


class DashboardConfig(BaseModel):
    """Dashboard dataset location and summary settings."""

    data_dir: str = Field(default="data")
    main_countries: list[str] = Field(
        default_factory=lambda: [
            "USA",
            "UK",
            "India",
            "Japan",
            "France",
            "Germany",
            "Australia",
        ]
    )
    summary_personas: int = Field(default=2, gt=0)
    summary_traits: int = Field(default=2, gt=0)
    summary_countries: int = Field(default=3, gt=0)


class TTSConfig(BaseModel):
    """Text-to-speech endpoint configuration."""

    endpoint: str = Field(default="http://localhost:3000/api/text-to-speech")
    timeout: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, ge=1, le=10)


class AppSettings(BaseModel):
    """Application settings model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    tts: TTSConfig = Field(default_factory=TTSConfig)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> "AppSettings":
        """Load settings from a JSON config file.

        Args:
            config_path: Path to settings.json (defaults to config/settings.json)

        Returns:
            AppSettings: Validated configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config validation fails
        """
        if config_path is None:
            config_path = Path("config/settings.json")
        else:
            config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}. "
                f"Copy {config_path.stem}.example.json to {config_path.name}"
            )

        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)

        return cls(**config_data)

    @classmethod
    def from_env(
        cls, config_path: Path | str | None = None, env_file: Path | str = ".env"
    ) -> "AppSettings":
        """Load settings, then apply PERSONASYNC_* environment overrides.

        The JSON file is optional here; defaults apply when it is missing.
        Variables in ``env_file`` are loaded without overriding the process
        environment.
        """
        load_dotenv(env_file)

        try:
            settings = cls.load(config_path)
        except FileNotFoundError:
            settings = cls()

        data = settings.model_dump()
        if os.getenv("PERSONASYNC_STORAGE_PATH"):
            data["storage"]["path"] = os.environ["PERSONASYNC_STORAGE_PATH"]
        if os.getenv("PERSONASYNC_TTS_ENDPOINT"):
            data["tts"]["endpoint"] = os.environ["PERSONASYNC_TTS_ENDPOINT"]
        if os.getenv("PERSONASYNC_LOG_LEVEL"):
            data["log_level"] = os.environ["PERSONASYNC_LOG_LEVEL"]

        return cls(**data)


def build_store(settings: AppSettings) -> KeyValueStore:
    """Create the key-value store selected by ``settings.storage.backend``."""
    if settings.storage.backend == "memory":
        return InMemoryStore()
    return JsonFileStore(settings.storage.path)
