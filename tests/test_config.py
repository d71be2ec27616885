import logging
from decimal import Decimal

import pytest

from splitshare.config import Settings, get_settings
from splitshare.logging import configure_logging, get_logger
from splitshare.money import Money
from splitshare.services.split import AmountMismatchError, SplitInput, compute_split


@pytest.fixture
def settings_env(monkeypatch):
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


def test_defaults(settings_env):
    settings = Settings(_env_file=None)  # type: ignore[call-arg]
    assert settings.default_currency == "USD"
    assert settings.exact_tolerance_cents == 1
    assert settings.percentage_tolerance == Decimal("0.01")
    assert settings.log_level_number == logging.INFO


def test_env_overrides(settings_env):
    settings_env.setenv("LOG_LEVEL", "debug")
    settings_env.setenv("SPLIT_EXACT_TOLERANCE_CENTS", "0")

    settings = get_settings()

    assert settings.log_level_number == logging.DEBUG
    assert settings.exact_tolerance_cents == 0
    with pytest.raises(AmountMismatchError):
        compute_split("exact", Money(10000), inputs=[SplitInput(p, "33.33") for p in "abc"])


def test_unknown_log_level_falls_back_to_info(settings_env):
    settings_env.setenv("LOG_LEVEL", "chatty")
    assert get_settings().log_level_number == logging.INFO


def test_configure_logging(settings_env):
    configure_logging()
    log = get_logger("splitshare.tests")
    log.info("test.event", answer=42)
