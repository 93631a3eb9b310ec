from __future__ import annotations

import logging

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, start_http_server


logger = logging.getLogger(__name__)


class Metrics:
    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        self.requests_total = Counter(
            "wiki_requests_total", "Summary requests issued", registry=self.registry
        )
        self.request_retries_total = Counter(
            "wiki_request_retries_total", "Summary request retries", ["reason"], registry=self.registry
        )
        self.fetch_failures_total = Counter(
            "wiki_fetch_failures_total", "Summary requests that gave up", ["kind"], registry=self.registry
        )
        self.request_latency_seconds = Histogram(
            "wiki_request_latency_seconds",
            "Summary request latency",
            buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10),
            registry=self.registry,
        )

        self.loads_total = Counter("feed_loads_total", "Feed loads started", registry=self.registry)
        self.load_failures_total = Counter(
            "feed_load_failures_total", "Feed loads that failed", ["kind"], registry=self.registry
        )
        self.articles = Gauge("feed_articles", "Articles in the feed", registry=self.registry)

    def start_server(self, bind: str, port: int) -> None:
        start_http_server(port, addr=bind, registry=self.registry)
        logger.info("metrics server started at %s:%s", bind, port)
