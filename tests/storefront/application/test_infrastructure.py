"""Tests for the logging and schema helpers."""

import structlog

from storefront.domain import storefront
from storefront.utils.db import drop_db, setup_db
from storefront.utils.logging import add_context, clear_context, get_log_level


class TestLogLevel:
    def test_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("ENV", raising=False)

        monkeypatch.setenv("PROTEAN_ENV", "production")
        assert get_log_level() == "INFO"

        monkeypatch.setenv("PROTEAN_ENV", "test")
        assert get_log_level() == "WARNING"

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert get_log_level() == "ERROR"


class TestLogContext:
    def test_bind_and_clear(self):
        add_context(user_id="user-1")
        assert structlog.contextvars.get_contextvars()["user_id"] == "user-1"

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}


class TestSchemaHelpers:
    def test_memory_providers_need_no_schema(self):
        assert setup_db(storefront) == []
        assert drop_db(storefront) == []
