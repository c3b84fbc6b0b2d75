# tests/core/test_config.py
"""Tests for settings, token generation and logging setup"""
import logging
from logging.handlers import RotatingFileHandler

import pytest
from pydantic import ValidationError

from cinema_tokens.core.config import RedisStoreSettings, Settings, describe_store
from cinema_tokens.core.logging_config import setup_logging
from cinema_tokens.core.tokens import TOKEN_ALPHABET, generate_token


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SESSION_REDIS__HOST", raising=False)
        settings = Settings(_env_file=None)

        assert settings.SESSION_REDIS.host == "localhost"
        assert settings.SESSION_REDIS.db == 0
        assert settings.CSRF_REDIS.db == 1
        assert settings.NEAR_FILMS_REDIS.db == 2
        assert settings.SESSION_REDIS.timer == 5.0

    def test_nested_env_vars(self, monkeypatch):
        monkeypatch.setenv("SESSION_REDIS__HOST", "redis-sessions")
        monkeypatch.setenv("SESSION_REDIS__PASSWORD", "secret")
        monkeypatch.setenv("SESSION_REDIS__TIMER", "2")
        monkeypatch.setenv("CSRF_REDIS__DB", "5")

        settings = Settings(_env_file=None)

        assert settings.SESSION_REDIS.host == "redis-sessions"
        assert settings.SESSION_REDIS.password == "secret"
        assert settings.SESSION_REDIS.timer == 2.0
        assert settings.CSRF_REDIS.db == 5

    def test_probe_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            RedisStoreSettings(timer=0)

    def test_describe_store_hides_password(self):
        text = describe_store("sessions", RedisStoreSettings(host="cache", password="hunter2", db=3))

        assert "cache:6379/3" in text
        assert "hunter2" not in text


class TestTokens:

    def test_length_and_alphabet(self):
        token = generate_token()

        assert len(token) == 32
        assert set(token) <= set(TOKEN_ALPHABET)

    def test_custom_length(self):
        assert len(generate_token(8)) == 8

    def test_tokens_differ(self):
        assert len({generate_token() for _ in range(50)}) == 50


class TestLogging:

    def test_file_handler_attached_once(self, tmp_path):
        root = logging.getLogger()
        before = list(root.handlers)
        try:
            setup_logging(str(tmp_path), "test.log")
            setup_logging(str(tmp_path), "test.log")

            log_file = str((tmp_path / "test.log").resolve())
            file_handlers = [
                h for h in root.handlers
                if isinstance(h, RotatingFileHandler) and h.baseFilename == log_file
            ]
            assert len(file_handlers) == 1
            assert (tmp_path / "test.log").exists()
        finally:
            for handler in root.handlers[:]:
                if handler not in before:
                    root.removeHandler(handler)
                    handler.close()

    def test_log_level_argument_sets_root_level(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        try:
            setup_logging(str(tmp_path), "level.log", "debug")

            assert root.level == logging.DEBUG
        finally:
            root.setLevel(level)
            for handler in root.handlers[:]:
                if handler not in before:
                    root.removeHandler(handler)
                    handler.close()
