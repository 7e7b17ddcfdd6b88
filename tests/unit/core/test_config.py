"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from app.core.config import Settings, get_settings, reload_settings
from app.domain.models import DEFAULT_ITEM_TYPE_KEYWORDS
from app.services.orders.converters import ImportPolicy


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.DEFAULT_PAGE_SIZE == 10
        assert settings.SHIPPING_DEADLINE_DAYS == 5
        assert settings.IMPORT_ALLOWED_EXTENSIONS == [".xlsx"]
        assert list(settings.IMPORT_ITEM_TYPE_KEYWORDS) == ["roblox", "minecraft", "harry potter", "barbie"]
        assert settings.import_max_file_size_bytes == 10 * 1024 * 1024

    def test_item_type_keywords_share_one_default(self):
        settings = Settings(_env_file=None)
        settings.IMPORT_ITEM_TYPE_KEYWORDS["pokemon"] = "Pokemon"

        assert "pokemon" not in DEFAULT_ITEM_TYPE_KEYWORDS
        assert ImportPolicy().item_type_keywords == DEFAULT_ITEM_TYPE_KEYWORDS
        assert Settings(_env_file=None).IMPORT_ITEM_TYPE_KEYWORDS == DEFAULT_ITEM_TYPE_KEYWORDS

    def test_log_level_and_environment_are_normalized(self):
        settings = Settings(LOG_LEVEL="debug", ENVIRONMENT="Production")

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.is_production

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(ENVIRONMENT="moon")

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(DEFAULT_PAGE_SIZE=0)

    def test_cors_allows_everything_in_development(self):
        settings = Settings(ENVIRONMENT="development", CORS_ALLOW_LIST="https://shop.example")

        assert settings.cors_allowed_origins == ["*"]

    def test_cors_allow_list_outside_development(self):
        settings = Settings(ENVIRONMENT="production", CORS_ALLOW_LIST="https://a.example, https://b.example,")

        assert settings.cors_allowed_origins == ["https://a.example", "https://b.example"]

    def test_extensions_are_normalized(self):
        settings = Settings(IMPORT_ALLOWED_EXTENSIONS=["XLSX", ".Xlsm"])

        assert settings.IMPORT_ALLOWED_EXTENSIONS == [".xlsx", ".xlsm"]


class TestSettingsCache:
    def test_reload_replaces_cached_instance(self):
        first = get_settings()

        assert get_settings() is first
        assert reload_settings() is not first
