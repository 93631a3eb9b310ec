from __future__ import annotations

from dataclasses import dataclass
import os


def _env_str(name: str, default: str | None = None) -> str:
    value = os.getenv(name)
    if value is None:
        if default is None:
            raise RuntimeError(f"Missing required env: {name}")
        return default
    return value


def _env_int(name: str, default: int | None = None) -> int:
    value = os.getenv(name)
    if value is None:
        if default is None:
            raise RuntimeError(f"Missing required env: {name}")
        return default
    return int(value)


def _env_float(name: str, default: float | None = None) -> float:
    value = os.getenv(name)
    if value is None:
        if default is None:
            raise RuntimeError(f"Missing required env: {name}")
        return default
    return float(value)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip().lower()
    return value in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Config:
    # Upstream
    wiki_lang: str
    wiki_api_base: str
    user_agent: str

    # Requests
    request_timeout_seconds: float
    max_attempts: int
    retry_base_delay_seconds: float
    max_retry_after_seconds: float

    # Feed
    initial_batch_size: int
    page_batch_size: int
    recovery_settle_seconds: float

    # Connectivity
    connectivity_probe_url: str
    connectivity_interval_seconds: float

    # Metrics
    metrics_enabled: bool
    metrics_bind: str
    metrics_port: int

    # Logging
    log_level: str
    log_file: str


def load_config() -> Config:
    lang = _env_str("WIKI_LANG", "en")
    return Config(
        wiki_lang=lang,
        wiki_api_base=_env_str("WIKI_API_BASE", f"https://{lang}.wikipedia.org/api/rest_v1"),
        user_agent=_env_str("USER_AGENT", "wikiscroll/0.1 (https://github.com/wikiscroll/wikiscroll)"),
        request_timeout_seconds=_env_float("REQUEST_TIMEOUT_SECONDS", 10.0),
        max_attempts=_env_int("MAX_ATTEMPTS", 3),
        retry_base_delay_seconds=_env_float("RETRY_BASE_DELAY_SECONDS", 1.0),
        max_retry_after_seconds=_env_float("MAX_RETRY_AFTER_SECONDS", 60.0),
        initial_batch_size=_env_int("INITIAL_BATCH_SIZE", 8),
        page_batch_size=_env_int("PAGE_BATCH_SIZE", 5),
        recovery_settle_seconds=_env_float("RECOVERY_SETTLE_SECONDS", 0.5),
        connectivity_probe_url=_env_str("CONNECTIVITY_PROBE_URL", f"https://{lang}.wikipedia.org/"),
        connectivity_interval_seconds=_env_float("CONNECTIVITY_INTERVAL_SECONDS", 15.0),
        metrics_enabled=_env_bool("METRICS_ENABLED", False),
        metrics_bind=_env_str("METRICS_BIND", "127.0.0.1"),
        metrics_port=_env_int("METRICS_PORT", 9109),
        log_level=_env_str("LOG_LEVEL", "INFO"),
        log_file=_env_str("LOG_FILE", ""),
    )
