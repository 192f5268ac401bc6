# src/services/history_viewer.py

"""Lazily fetches a rate series for one pair and hands it to a renderer."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol

from src.config.settings import Settings
from src.models.currency import normalize_code
from src.models.errors import NetworkError
from src.models.rates import ChartSpec, HistoricalSeries, build_chart_spec
from src.services.rate_client import FrankfurterClient

logger = logging.getLogger("currency_flow.history")


class ChartRenderer(Protocol):
    """Draws a single series; ``destroy`` drops whatever was drawn."""

    def draw(self, spec: ChartSpec) -> None: ...

    def destroy(self) -> None: ...


@dataclass(frozen=True)
class SeriesQuery:
    """Parameters of one historical fetch, kept for retries."""

    from_code: str
    to_code: str
    lookback_days: int


@dataclass(frozen=True)
class SeriesError:
    """A dismissible chart-panel error with the query to retry."""

    message: str
    query: SeriesQuery


class HistoryViewer:
    """Chart panel controller for one currency pair at a time.

    Fetches only while visible.  Each fetch gets a generation number
    and only the newest one may draw, so a slow response for an old
    pair or window never replaces a newer chart.
    """

    def __init__(
        self,
        client: FrankfurterClient | None = None,
        renderer: ChartRenderer | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.settings = Settings()
        self.client = client or FrankfurterClient()
        self.renderer = renderer
        self._today = today
        self.visible: bool = False
        self.lookback_days: int = self.settings.DEFAULT_LOOKBACK_DAYS
        self.series: HistoricalSeries | None = None
        self.error: SeriesError | None = None
        self._generation: int = 0

    def date_range(self, lookback_days: int) -> tuple[date, date]:
        """Inclusive ``(start, end)`` ending today."""
        end = self._today()
        return end - timedelta(days=lookback_days), end

    async def load_series(
        self,
        from_code: str,
        to_code: str,
        lookback_days: int,
    ) -> HistoricalSeries | None:
        """Fetch and draw the series; ``None`` if superseded meanwhile.

        Raises:
            ValueError: *lookback_days* is not a supported window.
            NetworkError: the fetch failed; the last chart stays drawn
                and :attr:`error` holds the retry parameters.
        """
        if lookback_days not in self.settings.LOOKBACK_WINDOWS:
            raise ValueError(
                f"Unsupported lookback window: {lookback_days} days"
            )
        query = SeriesQuery(
            normalize_code(from_code), normalize_code(to_code), lookback_days
        )
        start, end = self.date_range(lookback_days)

        self._generation += 1
        generation = self._generation
        try:
            series = await asyncio.to_thread(
                self.client.fetch_series,
                query.from_code,
                query.to_code,
                start,
                end,
            )
        except NetworkError as exc:
            logger.error(
                "Series fetch %s->%s failed: %s",
                query.from_code,
                query.to_code,
                exc,
            )
            if generation == self._generation:
                self.error = SeriesError(str(exc), query)
            raise

        if generation != self._generation:
            logger.info(
                "Dropping stale series %s->%s (%dd)",
                query.from_code,
                query.to_code,
                lookback_days,
            )
            return None

        self.series = series
        self.error = None
        self._render(series)
        return series

    def _render(self, series: HistoricalSeries) -> None:
        if self.renderer is None:
            return
        self.renderer.destroy()
        self.renderer.draw(build_chart_spec(series))

    async def _load_quietly(self, query: SeriesQuery) -> None:
        """Load for the panel; failures stay in :attr:`error`."""
        try:
            await self.load_series(
                query.from_code, query.to_code, query.lookback_days
            )
        except NetworkError as exc:
            logger.debug("Series error kept for the panel: %s", exc)

    async def toggle(self, from_code: str, to_code: str) -> bool:
        """Show (and load) or hide the panel; return the new visibility."""
        self.visible = not self.visible
        if self.visible:
            await self._load_quietly(
                SeriesQuery(from_code, to_code, self.lookback_days)
            )
        return self.visible

    async def on_parameters_changed(
        self,
        from_code: str,
        to_code: str,
        lookback_days: int | None = None,
    ) -> None:
        """Reload for a new pair or window, but only while visible.

        Any load still in flight is for the old parameters and is
        dropped when it resolves, even while the panel is hidden.
        """
        if lookback_days is not None:
            self.lookback_days = lookback_days
        self._generation += 1
        if not self.visible:
            return
        await self._load_quietly(
            SeriesQuery(from_code, to_code, self.lookback_days)
        )

    async def retry(self) -> None:
        """Re-issue the request that produced the current error."""
        if self.error is None:
            return
        query = self.error.query
        self.error = None
        await self._load_quietly(query)

    def dismiss_error(self) -> None:
        self.error = None
