from unittest.mock import patch

import pytest

from src.config import Settings, settings as app_settings


@pytest.fixture
def settings():
    return Settings(
        KITE_API_KEY="test_api_key",
        KITE_API_SECRET="test_api_secret",
        KITE_API_URL="https://kite-test.example.com",
        EXCHANGE_BACKOFF_BASE=0.0,
        EXCHANGE_DEADLINE=5.0,
    )


@pytest.fixture
def configured_settings(settings):
    overrides = {name: getattr(settings, name) for name in Settings.model_fields}
    with patch.multiple(app_settings, **overrides):
        yield app_settings
