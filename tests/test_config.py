"""Tests for wikiscroll.config."""

import pytest

from wikiscroll.config import load_config


_VARS = (
    "WIKI_LANG",
    "WIKI_API_BASE",
    "REQUEST_TIMEOUT_SECONDS",
    "MAX_ATTEMPTS",
    "INITIAL_BATCH_SIZE",
    "PAGE_BATCH_SIZE",
    "RECOVERY_SETTLE_SECONDS",
    "CONNECTIVITY_PROBE_URL",
    "METRICS_ENABLED",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = load_config()

    assert config.wiki_lang == "en"
    assert config.wiki_api_base == "https://en.wikipedia.org/api/rest_v1"
    assert config.request_timeout_seconds == 10.0
    assert config.max_attempts == 3
    assert config.retry_base_delay_seconds == 1.0
    assert config.max_retry_after_seconds == 60.0
    assert config.initial_batch_size == 8
    assert config.page_batch_size == 5
    assert config.recovery_settle_seconds == 0.5
    assert config.connectivity_probe_url == "https://en.wikipedia.org/"
    assert config.metrics_enabled is False
    assert config.log_level == "INFO"


def test_language_drives_urls(monkeypatch) -> None:
    monkeypatch.setenv("WIKI_LANG", "fr")

    config = load_config()

    assert config.wiki_api_base == "https://fr.wikipedia.org/api/rest_v1"
    assert config.connectivity_probe_url == "https://fr.wikipedia.org/"


def test_overrides(monkeypatch) -> None:
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("MAX_ATTEMPTS", "5")
    monkeypatch.setenv("METRICS_ENABLED", "yes")

    config = load_config()

    assert config.request_timeout_seconds == 2.5
    assert config.max_attempts == 5
    assert config.metrics_enabled is True


def test_invalid_int_raises(monkeypatch) -> None:
    monkeypatch.setenv("PAGE_BATCH_SIZE", "many")

    with pytest.raises(ValueError):
        load_config()
