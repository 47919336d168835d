"""Tests for environment-driven settings."""

import pytest

from storefront.domain.exceptions import ConfigurationError
from storefront.infrastructure.config import Settings


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.order_cache_capacity == 50
        assert settings.notification_interval == 5.0
        assert settings.log_level == "INFO"
        assert settings.log_json is False
        assert settings.db_path.endswith("storefront.db")

    def test_overrides(self):
        settings = Settings.from_env(
            {
                "STOREFRONT_DB_PATH": "/tmp/shop.db",
                "STOREFRONT_ORDER_CACHE_CAPACITY": "5",
                "STOREFRONT_NOTIFICATION_INTERVAL": "0.5",
                "STOREFRONT_LOG_LEVEL": "debug",
                "STOREFRONT_LOG_JSON": "true",
            }
        )
        assert settings.db_path == "/tmp/shop.db"
        assert settings.order_cache_capacity == 5
        assert settings.notification_interval == 0.5
        assert settings.log_level == "DEBUG"
        assert settings.log_json is True

    @pytest.mark.parametrize(
        "env",
        [
            {"STOREFRONT_ORDER_CACHE_CAPACITY": "many"},
            {"STOREFRONT_ORDER_CACHE_CAPACITY": "0"},
            {"STOREFRONT_NOTIFICATION_INTERVAL": "-1"},
            {"STOREFRONT_LOG_LEVEL": "chatty"},
        ],
    )
    def test_invalid_values(self, env):
        with pytest.raises(ConfigurationError):
            Settings.from_env(env)
