"""
Unit Tests - Configuration
"""
import logging
from datetime import date
from decimal import Decimal

import pytest
import structlog
from pydantic import ValidationError

from ecommerce_reports.config import ReportSettings, Settings, configure_logging, report_context
from ecommerce_reports.config.settings import DatabaseSettings


class TestSettings:
    """Tests for application settings"""

    def test_testing_environment(self, test_settings):
        assert test_settings.app_env == "testing"
        assert not test_settings.is_production

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(app_env="qa")

    def test_report_defaults(self):
        settings = ReportSettings()

        assert settings.vip_threshold == Decimal("15000")
        assert settings.loyal_threshold == Decimal("8000")
        assert settings.top_products_limit == 10
        assert settings.top_customers_limit == 5

    def test_report_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("REPORT_VIP_THRESHOLD", "20000")
        monkeypatch.setenv("REPORT_REFERENCE_DATE", "2024-04-01")

        settings = ReportSettings()

        assert settings.vip_threshold == Decimal("20000")
        assert settings.reference_date == date(2024, 4, 1)

    def test_loyal_threshold_above_vip_rejected(self):
        with pytest.raises(ValidationError):
            ReportSettings(vip_threshold=Decimal("100"), loyal_threshold=Decimal("200"))

    def test_database_url_override(self):
        settings = DatabaseSettings(DATABASE_URL="sqlite+aiosqlite:///reports.db")

        assert settings.async_url == "sqlite+aiosqlite:///reports.db"

    def test_database_url_built_for_asyncpg(self):
        settings = DatabaseSettings(host="db", port=5433, user="u", password="p", database="shop")

        assert settings.async_url == "postgresql+asyncpg://u:p@db:5433/shop"

    def test_database_name_from_environment(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("POSTGRES_DATABASE", "shop")

        settings = DatabaseSettings()

        assert settings.db == "shop"
        assert settings.async_url.endswith("/shop")


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestLogging:
    """Tests for structlog configuration"""

    def test_configure_logging_sets_level(self, restore_logging):
        configure_logging("DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_unknown_level_falls_back_to_info(self, restore_logging):
        configure_logging("chatty")

        assert logging.getLogger().level == logging.INFO

    def test_report_context_binds_and_clears(self):
        with report_context(report="top_products"):
            assert structlog.contextvars.get_contextvars() == {"report": "top_products"}

        assert "report" not in structlog.contextvars.get_contextvars()
