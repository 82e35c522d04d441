"""
Unit tests for configuration models.
"""

import json

import pytest
from pydantic import ValidationError

from personasync.models.config import AppSettings, TTSConfig, build_store
from personasync.utils.kv_store import InMemoryStore, JsonFileStore


class TestAppSettings:
    """Test cases for AppSettings."""

    def test_defaults(self):
        """Test default configuration values."""
        settings = AppSettings()

        assert settings.storage.backend == "file"
        assert settings.storage.current_user_key == "currentUser"
        assert settings.storage.user_prefix == "personasync_user_"
        assert settings.dashboard.main_countries[:2] == ["USA", "UK"]
        assert settings.tts.max_attempts == 3
        assert settings.log_level == "INFO"

    def test_log_level_normalised(self):
        assert AppSettings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            AppSettings(log_level="VERBOSE")

    def test_invalid_backend_rejected(self):
        with pytest.raises(ValidationError):
            AppSettings(storage={"backend": "redis"})

    def test_tts_bounds(self):
        with pytest.raises(ValidationError):
            TTSConfig(timeout=0)
        with pytest.raises(ValidationError):
            TTSConfig(max_attempts=11)

    def test_load_from_file(self, tmp_path):
        """Test that load reads and validates a JSON config file."""
        # Arrange
        config_path = tmp_path / "settings.json"
        config_path.write_text(
            json.dumps(
                {
                    "storage": {"backend": "memory"},
                    "tts": {"endpoint": "http://tts.local/speak"},
                    "log_level": "warning",
                }
            )
        )

        # Act
        settings = AppSettings.load(config_path)

        # Assert
        assert settings.storage.backend == "memory"
        assert settings.tts.endpoint == "http://tts.local/speak"
        assert settings.log_level == "WARNING"

    def test_load_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="settings.example.json"):
            AppSettings.load(tmp_path / "settings.json")

    def test_from_env_overrides(self, tmp_path, monkeypatch):
        """Test that PERSONASYNC_* variables override file values."""
        # Arrange
        monkeypatch.setenv("PERSONASYNC_STORAGE_PATH", str(tmp_path / "s.json"))
        monkeypatch.setenv("PERSONASYNC_TTS_ENDPOINT", "http://env.local/tts")
        monkeypatch.setenv("PERSONASYNC_LOG_LEVEL", "error")

        # Act
        settings = AppSettings.from_env(
            tmp_path / "missing.json", env_file=tmp_path / ".env"
        )

        # Assert
        assert settings.storage.path == str(tmp_path / "s.json")
        assert settings.tts.endpoint == "http://env.local/tts"
        assert settings.log_level == "ERROR"

    def test_from_env_reads_dotenv_file(self, tmp_path, monkeypatch):
        """Test that values in the .env file are applied."""
        # Arrange
        monkeypatch.delenv("PERSONASYNC_TTS_ENDPOINT", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("PERSONASYNC_TTS_ENDPOINT=http://dotenv.local/tts\n")

        # Act
        settings = AppSettings.from_env(tmp_path / "missing.json", env_file=env_file)

        # Assert
        assert settings.tts.endpoint == "http://dotenv.local/tts"
        monkeypatch.delenv("PERSONASYNC_TTS_ENDPOINT", raising=False)

    def test_example_config_is_valid(self):
        """Test that the shipped example config validates."""
        settings = AppSettings.load("config/settings.example.json")

        assert settings.storage.path == "data/session_store.json"


class TestBuildStore:
    """Test cases for build_store."""

    def test_memory_backend(self):
        store = build_store(AppSettings(storage={"backend": "memory"}))

        assert isinstance(store, InMemoryStore)

    def test_file_backend(self, tmp_path):
        path = tmp_path / "store.json"

        store = build_store(AppSettings(storage={"backend": "file", "path": str(path)}))

        assert isinstance(store, JsonFileStore)
        assert store.path == path
