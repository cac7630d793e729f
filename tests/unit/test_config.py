"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.config import Settings


class TestSettings:
    """Tests for Settings loading."""

    def test_missing_jwt_secret_fails(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET", raising=False)
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None)

    def test_blank_jwt_secret_fails(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "   ")
        with pytest.raises(PydanticValidationError, match="JWT_SECRET"):
            Settings(_env_file=None)

    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "a-real-secret")
        for name in (("TOKEN_EXPIRE_DAYS", "MIN_PASSWORD_LENGTH", "SESSION_BACKEND", "LOG_FORMAT", "PORT")):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.token_expire_days == 30
        assert settings.min_password_length == 6
        assert settings.session_backend == "memory"
        assert settings.log_format == "json"
        assert settings.port == 5000

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "a-real-secret")
        monkeypatch.setenv("SESSION_BACKEND", "redis")
        monkeypatch.setenv("TOKEN_EXPIRE_DAYS", "7")

        settings = Settings(_env_file=None)

        assert settings.session_backend == "redis"
        assert settings.token_expire_days == 7

    def test_unknown_session_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "a-real-secret")
        monkeypatch.setenv("SESSION_BACKEND", "memcached")
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None)

    def test_unknown_log_format_rejected(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "a-real-secret")
        monkeypatch.setenv("LOG_FORMAT", "xml")
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None)
