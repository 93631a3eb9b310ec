from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Awaitable, Callable, Protocol

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from wikiscroll.api.errors import (
    SYSTEMIC_ERRORS,
    FetchError,
    FetchTimeoutError,
    HttpError,
    NoArticlesError,
    OfflineError,
    RateLimitedError,
    redact_detail,
)
from wikiscroll.api.parser import DEFAULT_LANG, parse_summary
from wikiscroll.api.transport import RawResponse, Transport
from wikiscroll.feed.types import Article
from wikiscroll.metrics.metrics import Metrics


logger = logging.getLogger(__name__)


DEFAULT_API_BASE = "https://en.wikipedia.org/api/rest_v1"
SUMMARY_PATH = "/page/random/summary"

Sleep = Callable[[float], Awaitable[Any]]

_DELTA_SECONDS = re.compile(r"[0-9]+")


class Connectivity(Protocol):
    def is_online(self) -> bool: ...


def parse_retry_after(value: str | None) -> float | None:
    """Parse a delta-seconds Retry-After value.

    The HTTP-date form and anything that is not a plain digit string give
    None, so the caller falls back to exponential backoff.
    """
    if value is None:
        return None
    value = value.strip()
    if not _DELTA_SECONDS.fullmatch(value):
        return None
    return float(value)


class WikipediaClient:
    """Fetches random page summaries with timeout, retry and backoff.

    Holds no state between calls, so one client can serve several feeds.
    """

    def __init__(
        self,
        transport: Transport,
        connectivity: Connectivity,
        api_base: str = DEFAULT_API_BASE,
        timeout_seconds: float = 10.0,
        max_attempts: int = 3,
        base_delay_seconds: float = 1.0,
        max_retry_after_seconds: float = 60.0,
        default_lang: str = DEFAULT_LANG,
        sleep: Sleep = asyncio.sleep,
        metrics: Metrics | None = None,
    ) -> None:
        self._transport = transport
        self._connectivity = connectivity
        self._url = api_base.rstrip("/") + SUMMARY_PATH
        self._timeout_seconds = timeout_seconds
        self._max_attempts = max(1, max_attempts)
        self._base_delay = base_delay_seconds
        self._max_retry_after = max_retry_after_seconds
        self._default_lang = default_lang
        self._sleep = sleep
        self._metrics = metrics

    def _backoff(self, retry_state: RetryCallState) -> float:
        attempt = retry_state.attempt_number
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, RateLimitedError):
            if exc.retry_after_seconds is not None:
                return min(exc.retry_after_seconds, self._max_retry_after)
            return self._base_delay * (2 ** (attempt - 1))
        return self._base_delay * attempt

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        reason = exc.error_type if isinstance(exc, FetchError) else "unknown"
        wait_s = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "summary request attempt %s failed (%s), retrying in %.1fs",
            retry_state.attempt_number,
            exc,
            wait_s,
        )
        if self._metrics is not None:
            self._metrics.request_retries_total.labels(reason=reason).inc()

    async def _request_once(self) -> RawResponse:
        if not self._connectivity.is_online():
            raise OfflineError()

        if self._metrics is not None:
            self._metrics.requests_total.inc()
        started = time.perf_counter()
        try:
            resp = await asyncio.wait_for(
                self._transport.request(self._url, {"Accept": "application/json"}),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise FetchTimeoutError(f"no response within {self._timeout_seconds:g}s") from e
        except httpx.TimeoutException as e:
            raise FetchTimeoutError(redact_detail(str(e) or type(e).__name__)) from e
        except FetchError:
            raise
        except Exception as e:
            raise HttpError(None, redact_detail(str(e) or type(e).__name__)) from e
        finally:
            if self._metrics is not None:
                self._metrics.request_latency_seconds.observe(time.perf_counter() - started)

        if resp.status == 429:
            raise RateLimitedError(parse_retry_after(resp.header("Retry-After")))
        if not resp.ok:
            raise HttpError(resp.status)
        return resp

    async def fetch_one(self) -> Article | None:
        """Fetch a single random summary.

        Returns None when the upstream payload is unusable. Raises
        OfflineError without touching the network when offline, and
        FetchTimeoutError, RateLimitedError or HttpError once every attempt
        has failed.
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception_type((FetchTimeoutError, RateLimitedError, HttpError)),
            stop=stop_after_attempt(self._max_attempts),
            wait=self._backoff,
            sleep=self._sleep,
            before_sleep=self._before_sleep,
            reraise=True,
        )
        try:
            resp = await retrying(self._request_once)
        except FetchError as e:
            if self._metrics is not None:
                self._metrics.fetch_failures_total.labels(kind=e.error_type).inc()
            raise

        article = parse_summary(resp.body, self._default_lang)
        if article is None:
            logger.debug("discarding unusable summary payload")
        return article

    async def _fetch_slot(self, slot: int) -> Article | None:
        try:
            return await self.fetch_one()
        except SYSTEMIC_ERRORS:
            raise
        except FetchError as e:
            logger.debug("slot %s yielded nothing: %s", slot, e)
            return None

    async def fetch_many(self, count: int) -> list[Article]:
        """Fetch up to `count` articles concurrently, one request per slot.

        Ordinary slot failures only shrink the batch. A rate limit or timeout
        in any slot discards the whole batch and is raised instead.
        """
        results = await asyncio.gather(
            *(self._fetch_slot(i) for i in range(count)),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException):
                raise result

        articles = [a for a in results if a is not None]
        if not articles:
            if not self._connectivity.is_online():
                raise OfflineError()
            raise NoArticlesError()
        return articles
