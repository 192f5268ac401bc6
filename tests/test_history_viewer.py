# tests/test_history_viewer.py

"""Tests for the lazily loaded historical series viewer."""

import asyncio
import threading
import unittest
from datetime import date, timedelta
from unittest.mock import MagicMock

from src.models.errors import NetworkError
from src.models.rates import ChartSpec, HistoricalSeries, RatePoint
from src.services.history_viewer import HistoryViewer

_TODAY = date(2024, 3, 10)


def _series(from_code: str, to_code: str, start: date, end: date) -> HistoricalSeries:
    """Six weekday points inside the range, like the provider returns."""
    points = [
        RatePoint(start + timedelta(days=i), 0.92 + i / 1000)
        for i in range(1, 7)
        if start + timedelta(days=i) <= end
    ]
    return HistoricalSeries(from_code, to_code, points)


class _RecordingRenderer:
    """Renderer that records draw/destroy calls in order."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.specs: list[ChartSpec] = []

    def destroy(self) -> None:
        self.calls.append("destroy")

    def draw(self, spec: ChartSpec) -> None:
        self.calls.append("draw")
        self.specs.append(spec)


class TestHistoryViewer(unittest.IsolatedAsyncioTestCase):
    """Series loading, panel visibility and error handling."""

    def setUp(self) -> None:
        self.client = MagicMock()
        self.client.fetch_series.side_effect = _series
        self.renderer = _RecordingRenderer()
        self.viewer = HistoryViewer(
            self.client, renderer=self.renderer, today=lambda: _TODAY
        )

    async def test_scenario_d_requests_inclusive_range(self) -> None:
        series = await self.viewer.load_series("USD", "EUR", 7)

        self.client.fetch_series.assert_called_once_with(
            "USD", "EUR", date(2024, 3, 3), date(2024, 3, 10)
        )
        assert series is not None
        self.assertEqual(len(series), 6)
        spec = self.renderer.specs[-1]
        self.assertEqual(len(spec.series), 6)
        self.assertEqual(len(spec.labels), 6)
        self.assertEqual(spec.title, "USD to EUR Exchange Rate History")

    async def test_render_replaces_previous_chart(self) -> None:
        await self.viewer.load_series("USD", "EUR", 7)
        await self.viewer.load_series("USD", "JPY", 30)
        self.assertEqual(
            self.renderer.calls, ["destroy", "draw", "destroy", "draw"]
        )
        self.assertEqual(self.renderer.specs[-1].series_label, "USD to JPY")

    async def test_pair_change_while_hidden_drops_inflight_load(self) -> None:
        release = threading.Event()

        def fetch(from_code: str, to_code: str, start: date, end: date) -> HistoricalSeries:
            release.wait(timeout=5)
            return _series(from_code, to_code, start, end)

        self.client.fetch_series.side_effect = fetch
        loading = asyncio.create_task(self.viewer.toggle("USD", "EUR"))
        await asyncio.sleep(0)
        self.assertFalse(await self.viewer.toggle("USD", "EUR"))
        await self.viewer.on_parameters_changed("USD", "GBP")
        release.set()
        await loading

        self.assertIsNone(self.viewer.series)
        self.assertEqual(self.renderer.calls, [])
        self.assertEqual(self.client.fetch_series.call_count, 1)

    async def test_unsupported_window_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            await self.viewer.load_series("USD", "EUR", 14)
        self.client.fetch_series.assert_not_called()

    async def test_scenario_e_show_then_hide_fetches_once(self) -> None:
        self.assertTrue(await self.viewer.toggle("USD", "EUR"))
        self.assertFalse(await self.viewer.toggle("USD", "EUR"))
        self.assertEqual(self.client.fetch_series.call_count, 1)
        # Hiding keeps the cached series
        self.assertIsNotNone(self.viewer.series)

    async def test_toggle_uses_default_window(self) -> None:
        await self.viewer.toggle("USD", "EUR")
        args = self.client.fetch_series.call_args[0]
        self.assertEqual(args[2], _TODAY - timedelta(days=30))

    async def test_hidden_panel_does_not_fetch(self) -> None:
        await self.viewer.on_parameters_changed("USD", "GBP", 90)
        self.client.fetch_series.assert_not_called()
        self.assertEqual(self.viewer.lookback_days, 90)

        await self.viewer.toggle("USD", "GBP")
        args = self.client.fetch_series.call_args[0]
        self.assertEqual(args[2], _TODAY - timedelta(days=90))

    async def test_visible_panel_refetches_on_change(self) -> None:
        await self.viewer.toggle("USD", "EUR")
        await self.viewer.on_parameters_changed("EUR", "USD")
        await self.viewer.on_parameters_changed("EUR", "USD", 180)
        self.assertEqual(self.client.fetch_series.call_count, 3)
        self.assertEqual(self.renderer.specs[-1].series_label, "EUR to USD")

    async def test_failure_keeps_chart_and_offers_retry(self) -> None:
        await self.viewer.toggle("USD", "EUR")
        previous = self.viewer.series
        draws = self.renderer.calls.count("draw")

        self.client.fetch_series.side_effect = NetworkError("HTTP 503")
        await self.viewer.on_parameters_changed("USD", "JPY", 7)

        self.assertIs(self.viewer.series, previous)
        self.assertEqual(self.renderer.calls.count("draw"), draws)
        error = self.viewer.error
        assert error is not None
        self.assertEqual(error.message, "HTTP 503")
        self.assertEqual(error.query.to_code, "JPY")

        self.client.fetch_series.side_effect = _series
        await self.viewer.retry()
        self.assertIsNone(self.viewer.error)
        args = self.client.fetch_series.call_args[0]
        self.assertEqual(args[:2], ("USD", "JPY"))
        self.assertEqual(args[2], _TODAY - timedelta(days=7))

    async def test_load_series_raises_network_error(self) -> None:
        self.client.fetch_series.side_effect = NetworkError("offline")
        with self.assertRaises(NetworkError):
            await self.viewer.load_series("USD", "EUR", 30)
        self.assertIsNotNone(self.viewer.error)

    async def test_dismiss_error(self) -> None:
        self.client.fetch_series.side_effect = NetworkError("offline")
        await self.viewer.toggle("USD", "EUR")
        self.viewer.dismiss_error()
        self.assertIsNone(self.viewer.error)
        await self.viewer.retry()
        self.assertEqual(self.client.fetch_series.call_count, 1)

    async def test_stale_series_is_not_drawn(self) -> None:
        """A slow fetch for an old pair must not replace the newer chart."""
        release = threading.Event()

        def fetch(from_code: str, to_code: str, start: date, end: date) -> HistoricalSeries:
            if to_code == "EUR":
                release.wait(timeout=5)
            return _series(from_code, to_code, start, end)

        self.client.fetch_series.side_effect = fetch
        slow = asyncio.create_task(self.viewer.load_series("USD", "EUR", 30))
        await asyncio.sleep(0)
        fresh = await self.viewer.load_series("USD", "JPY", 30)
        release.set()
        stale = await slow

        self.assertIsNone(stale)
        self.assertIs(self.viewer.series, fresh)
        self.assertEqual(self.renderer.calls.count("draw"), 1)
        self.assertEqual(self.renderer.specs[-1].series_label, "USD to JPY")


if __name__ == "__main__":
    unittest.main()
