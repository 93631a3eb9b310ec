"""Tests for wikiscroll.net.connectivity."""

import asyncio
from unittest.mock import Mock

import httpx

from wikiscroll.net.connectivity import ConnectivityMonitor, ConnectivityProber


class TestConnectivityMonitor:
    def test_defaults_online(self) -> None:
        assert ConnectivityMonitor().is_online()
        assert not ConnectivityMonitor(online=False).is_online()

    def test_recovery_fires_on_offline_to_online_edge(self) -> None:
        monitor = ConnectivityMonitor()
        callback = Mock()
        monitor.subscribe_recovery(callback)

        monitor.set_online(True)
        callback.assert_not_called()

        monitor.set_online(False)
        callback.assert_not_called()

        monitor.set_online(True)
        monitor.set_online(True)
        callback.assert_called_once_with()

    def test_unsubscribe(self) -> None:
        monitor = ConnectivityMonitor(online=False)
        callback = Mock()
        unsubscribe = monitor.subscribe_recovery(callback)

        unsubscribe()
        unsubscribe()
        monitor.set_online(True)

        callback.assert_not_called()

    def test_failing_callback_does_not_block_others(self) -> None:
        monitor = ConnectivityMonitor(online=False)
        broken = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        monitor.subscribe_recovery(broken)
        monitor.subscribe_recovery(healthy)

        monitor.set_online(True)

        broken.assert_called_once()
        healthy.assert_called_once()


class TestConnectivityProber:
    def probe(self, monitor, handler) -> bool:
        async def scenario():
            prober = ConnectivityProber(
                monitor,
                "https://en.wikipedia.org/",
                interval_seconds=15,
                transport=httpx.MockTransport(handler),
            )
            try:
                return await prober.probe_once()
            finally:
                await prober.aclose()

        return asyncio.run(scenario())

    def test_reachable_host_is_online(self) -> None:
        monitor = ConnectivityMonitor(online=False)
        callback = Mock()
        monitor.subscribe_recovery(callback)

        assert self.probe(monitor, lambda request: httpx.Response(200)) is True

        assert monitor.is_online()
        callback.assert_called_once()

    def test_client_error_still_counts_as_online(self) -> None:
        monitor = ConnectivityMonitor(online=False)

        assert self.probe(monitor, lambda request: httpx.Response(404)) is True

    def test_server_error_is_offline(self) -> None:
        monitor = ConnectivityMonitor()

        assert self.probe(monitor, lambda request: httpx.Response(503)) is False
        assert not monitor.is_online()

    def test_transport_failure_is_offline(self) -> None:
        monitor = ConnectivityMonitor()

        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        assert self.probe(monitor, handler) is False
        assert not monitor.is_online()
