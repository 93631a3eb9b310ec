from __future__ import annotations

import asyncio
import logging
from typing import Callable

import httpx


logger = logging.getLogger(__name__)


RecoveryCallback = Callable[[], None]


class ConnectivityMonitor:
    """Holds the current online flag and notifies on offline -> online edges."""

    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._callbacks: list[RecoveryCallback] = []

    def is_online(self) -> bool:
        return self._online

    def set_online(self, online: bool) -> None:
        was_online = self._online
        self._online = online
        if online == was_online:
            return
        if not online:
            logger.warning("connectivity lost")
            return

        logger.info("connectivity restored")
        for callback in list(self._callbacks):
            try:
                callback()
            except Exception:
                logger.exception("recovery callback failed")

    def subscribe_recovery(self, callback: RecoveryCallback) -> Callable[[], None]:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe


class ConnectivityProber:
    def __init__(
        self,
        monitor: ConnectivityMonitor,
        probe_url: str,
        interval_seconds: float,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._monitor = monitor
        self._url = probe_url
        self._interval = interval_seconds
        self._client = httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds), transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def probe_once(self) -> bool:
        try:
            resp = await self._client.head(self._url)
            online = resp.status_code < 500
        except httpx.HTTPError as e:
            logger.debug("probe %s failed: %s", self._url, e)
            online = False
        self._monitor.set_online(online)
        return online

    async def run(self) -> None:
        while True:
            try:
                await self.probe_once()
            except Exception:
                logger.exception("connectivity probe failed")
            await asyncio.sleep(self._interval)
