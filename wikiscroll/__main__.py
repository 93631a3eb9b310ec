from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

from wikiscroll.api.client import WikipediaClient
from wikiscroll.api.transport import HttpxTransport
from wikiscroll.config import Config, load_config
from wikiscroll.feed.loader import FeedLoader
from wikiscroll.logging_setup import setup_logging
from wikiscroll.metrics.metrics import Metrics
from wikiscroll.net.connectivity import ConnectivityMonitor, ConnectivityProber
from wikiscroll.render import render_article, render_error


logger = logging.getLogger(__name__)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="wikiscroll")
    parser.add_argument(
        "--env",
        default=".env",
        help="Path to .env file (default: .env).",
    )
    parser.add_argument(
        "--batches",
        type=int,
        default=3,
        help="Number of batches to load before exiting (default: 3).",
    )
    return parser.parse_args()


async def run(config: Config, batches: int) -> int:
    metrics = Metrics()
    if config.metrics_enabled:
        metrics.start_server(config.metrics_bind, config.metrics_port)

    connectivity = ConnectivityMonitor()
    prober = ConnectivityProber(
        connectivity,
        probe_url=config.connectivity_probe_url,
        interval_seconds=config.connectivity_interval_seconds,
    )
    transport = HttpxTransport(config.user_agent)
    client = WikipediaClient(
        transport,
        connectivity,
        api_base=config.wiki_api_base,
        timeout_seconds=config.request_timeout_seconds,
        max_attempts=config.max_attempts,
        base_delay_seconds=config.retry_base_delay_seconds,
        max_retry_after_seconds=config.max_retry_after_seconds,
        default_lang=config.wiki_lang,
        metrics=metrics,
    )
    loader = FeedLoader(
        client,
        connectivity,
        initial_batch=config.initial_batch_size,
        page_batch=config.page_batch_size,
        settle_seconds=config.recovery_settle_seconds,
        metrics=metrics,
    )

    await prober.probe_once()
    probe_task = asyncio.create_task(prober.run(), name="connectivity_probe")
    shown = 0
    try:
        for i in range(max(1, batches)):
            count = config.initial_batch_size if i == 0 else config.page_batch_size
            await loader.load_more(count)
            for index, article in enumerate(loader.articles[shown:], start=shown):
                print(render_article(article, index))
                print()
            shown = len(loader.articles)
            if loader.error is not None:
                print(render_error(loader.error))
                loader.clear_error()
    finally:
        probe_task.cancel()
        await asyncio.gather(probe_task, return_exceptions=True)
        await loader.aclose()
        await prober.aclose()
        await transport.aclose()

    logger.info("done: %s articles", shown)
    return 0 if shown else 1


def main() -> None:
    args = _parse_args()
    env_path = Path(args.env)
    if env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv()

    config = load_config()
    setup_logging(config.log_level, config.log_file)

    raise SystemExit(asyncio.run(run(config, args.batches)))


if __name__ == "__main__":
    main()
