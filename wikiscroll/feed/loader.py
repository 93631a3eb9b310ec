from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Protocol

from wikiscroll.api.errors import ERROR_OFFLINE, FetchError, error_kind
from wikiscroll.feed.types import Article, LoadState
from wikiscroll.metrics.metrics import Metrics
from wikiscroll.net.connectivity import ConnectivityMonitor


logger = logging.getLogger(__name__)


class ArticleSource(Protocol):
    async def fetch_many(self, count: int) -> list[Article]: ...


class FeedLoader:
    """Owns the accumulated feed and serializes loads into it.

    At most one load runs at a time; calls made while one is in flight are
    dropped. After an offline failure the loader retries on its own once
    connectivity comes back.
    """

    def __init__(
        self,
        source: ArticleSource,
        connectivity: ConnectivityMonitor,
        initial_batch: int = 8,
        page_batch: int = 5,
        settle_seconds: float = 0.5,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        metrics: Metrics | None = None,
    ) -> None:
        self._source = source
        self._initial_batch = initial_batch
        self._page_batch = page_batch
        self._settle_seconds = settle_seconds
        self._sleep = sleep
        self._metrics = metrics

        self._articles: list[Article] = []
        self._ids: set = set()
        self._loading = False
        self._initial_loading = True
        self._error: str | None = None
        self._last_exception: BaseException | None = None
        self._consecutive_failures = 0

        self._recovery_task: asyncio.Task | None = None
        self._closed = False
        self._unsubscribe = connectivity.subscribe_recovery(self._on_online)

    @property
    def articles(self) -> tuple[Article, ...]:
        return tuple(self._articles)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def initial_loading(self) -> bool:
        return self._initial_loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def last_exception(self) -> BaseException | None:
        return self._last_exception

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def state(self) -> LoadState:
        return LoadState(
            loading=self._loading,
            initial_loading=self._initial_loading,
            error=self._error,
            article_count=len(self._articles),
        )

    def clear_error(self) -> None:
        self._error = None
        self._last_exception = None

    def _merge(self, batch: list[Article]) -> int:
        # staged so a bad batch leaves the feed untouched
        ids = set(self._ids)
        fresh: list[Article] = []
        for article in batch:
            # ids may be 0, so membership is the only presence test
            if article.id in ids:
                continue
            ids.add(article.id)
            fresh.append(article)
        self._ids = ids
        self._articles = self._articles + fresh
        return len(fresh)

    async def load_more(self, count: int | None = None) -> int:
        """Fetch one batch and append the articles not already in the feed.

        Returns how many articles were appended. Returns 0 straight away if
        a load is already running.
        """
        if count is None:
            count = self._page_batch
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")

        # check-and-set before the first await
        if self._loading:
            logger.debug("load already in flight, ignoring request for %s", count)
            return 0
        self._loading = True
        self._error = None
        self._last_exception = None

        if self._metrics is not None:
            self._metrics.loads_total.inc()
        try:
            batch = await self._source.fetch_many(count)
            added = self._merge(batch)
            self._consecutive_failures = 0
            logger.info("loaded %s new articles (%s fetched, %s total)", added, len(batch), len(self._articles))
            if self._metrics is not None:
                self._metrics.articles.set(len(self._articles))
            return added
        except Exception as e:
            self._consecutive_failures += 1
            self._error = error_kind(e)
            self._last_exception = e
            logger.warning("failed to load articles: %s", e)
            if self._metrics is not None:
                kind = e.error_type if isinstance(e, FetchError) else "unknown"
                self._metrics.load_failures_total.labels(kind=kind).inc()
            return 0
        finally:
            self._loading = False
            self._initial_loading = False

    def schedule_load(self, count: int | None = None) -> asyncio.Task:
        return asyncio.get_running_loop().create_task(self.load_more(count))

    def _on_online(self) -> None:
        if self._closed or self._error != ERROR_OFFLINE:
            return
        if self._recovery_task is not None and not self._recovery_task.done():
            return
        logger.info("back online, reloading in %.1fs", self._settle_seconds)
        self._recovery_task = asyncio.get_running_loop().create_task(self._recover())

    async def _recover(self) -> None:
        await self._sleep(self._settle_seconds)
        if self._closed:
            return
        count = self._initial_batch if not self._articles else self._page_batch
        await self.load_more(count)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._unsubscribe()
        if self._recovery_task is not None:
            self._recovery_task.cancel()

    async def aclose(self) -> None:
        self.close()
        if self._recovery_task is not None:
            await asyncio.gather(self._recovery_task, return_exceptions=True)
