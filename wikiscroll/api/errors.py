from __future__ import annotations


class FetchError(Exception):
    def __init__(self, error_type: str, detail: str = ""):
        super().__init__(f"{error_type}: {detail}")
        self.error_type = error_type
        self.detail = detail


ERROR_OFFLINE = "offline"
ERROR_TIMEOUT = "timeout"
ERROR_RATE_LIMITED = "rate_limited"
ERROR_NO_ARTICLES = "no_articles"
ERROR_HTTP = "http_error"

GENERIC_ERROR_MESSAGE = "Failed to load articles. Please try again."


class OfflineError(FetchError):
    def __init__(self, detail: str = "connectivity lost"):
        super().__init__(ERROR_OFFLINE, detail)


class FetchTimeoutError(FetchError):
    def __init__(self, detail: str = "request timed out"):
        super().__init__(ERROR_TIMEOUT, detail)


class RateLimitedError(FetchError):
    def __init__(self, retry_after_seconds: float | None = None):
        detail = "429 too many requests"
        if retry_after_seconds is not None:
            detail += f" (retry after {retry_after_seconds:g}s)"
        super().__init__(ERROR_RATE_LIMITED, detail)
        self.retry_after_seconds = retry_after_seconds


class NoArticlesError(FetchError):
    def __init__(self, detail: str = "no usable articles in batch"):
        super().__init__(ERROR_NO_ARTICLES, detail)


class HttpError(FetchError):
    def __init__(self, status: int | None, detail: str = ""):
        if not detail:
            detail = f"{status} response" if status is not None else "network error"
        super().__init__(ERROR_HTTP, detail)
        self.status = status


# Reflect the channel, not a single payload: one of these voids the whole batch.
SYSTEMIC_ERRORS = (RateLimitedError, FetchTimeoutError)

_USER_FACING = {ERROR_OFFLINE, ERROR_TIMEOUT, ERROR_RATE_LIMITED, ERROR_NO_ARTICLES}


def error_kind(exc: BaseException) -> str:
    """Map a failed load to the tag the UI renders.

    Offline, timeout, rate limiting and empty batches each get a stable tag;
    everything else collapses into the generic message.
    """
    if isinstance(exc, FetchError) and exc.error_type in _USER_FACING:
        return exc.error_type
    return GENERIC_ERROR_MESSAGE


def redact_detail(detail: str) -> str:
    detail = detail.strip()
    if len(detail) > 240:
        detail = detail[:240] + "…"
    return detail
