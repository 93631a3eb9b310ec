from __future__ import annotations

import logging
from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import Any, Protocol

import httpx


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawResponse:
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> str | None:
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return None


class Transport(Protocol):
    async def request(self, url: str, headers: Mapping[str, str] | None = None) -> RawResponse: ...


class HttpxTransport:
    """Raw GET primitive backed by a shared httpx.AsyncClient.

    Does not interpret status codes or retry; cancelling the awaiting task
    aborts the in-flight request.
    """

    def __init__(
        self,
        user_agent: str,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(timeout_seconds),
            headers={"User-Agent": user_agent},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, url: str, headers: Mapping[str, str] | None = None) -> RawResponse:
        resp = await self._client.get(url, headers=dict(headers or {}))
        body = None
        if resp.content:
            try:
                body = resp.json()
            except ValueError:
                logger.debug("non-json body from %s status=%s", url, resp.status_code)
        return RawResponse(status=resp.status_code, headers=dict(resp.headers), body=body)
