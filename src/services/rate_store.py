# src/services/rate_store.py

"""Owns the current rate snapshot and serves conversions against it."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from src.config.settings import Settings
from src.models.currency import (
    FETCH_FAILED_TEXT,
    INVALID_AMOUNT_TEXT,
    RATE_UNAVAILABLE_TEXT,
    currency_name,
    normalize_code,
    parse_amount,
)
from src.models.errors import InvalidAmount, NetworkError, RateUnavailable
from src.models.rates import (
    ConversionRequest,
    ConversionResult,
    PopularRate,
    RateSnapshot,
)
from src.services.rate_client import FrankfurterClient

logger = logging.getLogger("currency_flow.store")


class Phase(str, Enum):
    """Lifecycle of the base-snapshot fetch."""

    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"
    FAILED = "failed"


@dataclass
class ConverterState:
    """Single-writer state shared by the converter and its views.

    Only :class:`RateStore` mutates it; UIs read it after each handler.
    """

    snapshot: RateSnapshot | None = None
    known_currencies: list[str] = field(
        default_factory=lambda: list[str]()
    )
    from_code: str = ""
    to_code: str = ""
    amount_text: str = "1"
    phase: Phase = Phase.IDLE
    last_error: str = ""


@dataclass(frozen=True)
class ConversionDisplay:
    """What the result field should show after a recomputation."""

    result_text: str
    status: str  # "ok", "invalid_amount", "rate_unavailable", "network_error"
    result: ConversionResult | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def default_to_code(base: str) -> str:
    """Default target: USD for a EUR base, EUR for everything else."""
    return "USD" if base == "EUR" else "EUR"


class RateStore:
    """Keeps exactly one current snapshot and converts against it."""

    def __init__(
        self,
        client: FrankfurterClient | None = None,
        state: ConverterState | None = None,
    ) -> None:
        self.settings = Settings()
        self.client = client or FrankfurterClient()
        self.state = state or ConverterState()
        self._generation: int = 0

    # ── Snapshot ─────────────────────────────────────────

    async def refresh_snapshot(self, base: str) -> RateSnapshot | None:
        """Fetch and commit the latest rates for *base*.

        Returns the committed snapshot, or ``None`` when a later call
        was issued while this one was in flight (its result is
        discarded so it cannot overwrite newer state).

        Raises:
            NetworkError: the fetch failed; the previous snapshot stays.
        """
        base = normalize_code(base)
        self._generation += 1
        generation = self._generation
        self.state.phase = Phase.FETCHING
        logger.debug("Snapshot fetch #%d for %s", generation, base)

        try:
            snapshot = await asyncio.to_thread(
                self.client.fetch_latest, base
            )
        except NetworkError as exc:
            logger.error(
                "Snapshot fetch for %s failed: %s", base, exc, exc_info=True
            )
            if generation == self._generation:
                self.state.phase = Phase.FAILED
                self.state.last_error = str(exc)
            raise

        if generation != self._generation:
            logger.info(
                "Discarding superseded snapshot for %s (#%d < #%d)",
                base,
                generation,
                self._generation,
            )
            return None
        if self.state.from_code and snapshot.base != self.state.from_code:
            logger.info(
                "Discarding %s snapshot; %s is selected now",
                snapshot.base,
                self.state.from_code,
            )
            if self.state.phase is Phase.FETCHING:
                self.state.phase = (
                    Phase.READY if self.state.snapshot else Phase.IDLE
                )
            return None

        self._commit(snapshot)
        return snapshot

    def _commit(self, snapshot: RateSnapshot) -> None:
        state = self.state
        first_load = not state.known_currencies
        state.snapshot = snapshot
        state.known_currencies = sorted(
            set(state.known_currencies) | set(snapshot.rates)
        )
        if first_load:
            state.from_code = snapshot.base
            if not state.to_code:
                state.to_code = default_to_code(snapshot.base)
        state.phase = Phase.READY
        state.last_error = ""
        logger.info(
            "Committed %s snapshot as of %s (%d known codes)",
            snapshot.base,
            snapshot.as_of,
            len(state.known_currencies),
        )

    # ── Conversion ───────────────────────────────────────

    def convert(
        self,
        from_code: str,
        to_code: str,
        amount: str | float,
    ) -> ConversionResult:
        """Convert *amount* using the current snapshot, without I/O.

        The snapshot's base is the implicit "from" side, so callers must
        :meth:`refresh_snapshot` first when *from_code* differs from it.

        Raises:
            InvalidAmount: amount is not a finite positive number.
            RateUnavailable: no snapshot for *from_code*, or *to_code*
                is absent from it.
        """
        value = parse_amount(amount)
        from_code = normalize_code(from_code)
        to_code = normalize_code(to_code)
        snapshot = self.state.snapshot
        if snapshot is None or snapshot.base != from_code:
            raise RateUnavailable(from_code, to_code)
        rate = snapshot.rates.get(to_code)
        if rate is None:
            raise RateUnavailable(from_code, to_code)
        return ConversionResult(
            from_code=from_code,
            to_code=to_code,
            amount=value,
            converted_amount=value * rate,
            rate_used=rate,
        )

    async def recompute(self) -> ConversionDisplay | None:
        """Recompute the result for the selected pair and amount.

        Re-fetches only when the selected "from" code differs from the
        snapshot's base.  Returns ``None`` if the fetch was superseded.
        """
        state = self.state
        try:
            request = ConversionRequest(
                state.from_code, state.to_code, parse_amount(state.amount_text)
            )
        except InvalidAmount:
            return ConversionDisplay(INVALID_AMOUNT_TEXT, "invalid_amount")

        snapshot = state.snapshot
        if snapshot is None or snapshot.base != request.from_code:
            try:
                committed = await self.refresh_snapshot(request.from_code)
            except NetworkError:
                return ConversionDisplay(FETCH_FAILED_TEXT, "network_error")
            if committed is None or committed.base != state.from_code:
                return None
            # The first commit may have filled in the default target
            request = ConversionRequest(
                state.from_code, state.to_code, request.amount
            )

        try:
            result = self.convert(
                request.from_code, request.to_code, request.amount
            )
        except RateUnavailable as exc:
            logger.debug("%s", exc)
            return ConversionDisplay(RATE_UNAVAILABLE_TEXT, "rate_unavailable")
        return ConversionDisplay(result.display_amount, "ok", result)

    # ── Input handlers ───────────────────────────────────

    async def select_from(self, code: str) -> ConversionDisplay | None:
        self.state.from_code = normalize_code(code)
        return await self.recompute()

    async def select_to(self, code: str) -> ConversionDisplay | None:
        self.state.to_code = normalize_code(code)
        return await self.recompute()

    async def set_amount(self, text: str) -> ConversionDisplay | None:
        self.state.amount_text = text
        return await self.recompute()

    async def swap(self) -> ConversionDisplay | None:
        """Exchange the selected codes and recompute."""
        state = self.state
        state.from_code, state.to_code = state.to_code, state.from_code
        logger.debug("Swapped to %s->%s", state.from_code, state.to_code)
        return await self.recompute()

    # ── Views ────────────────────────────────────────────

    def popular_rates(
        self, amount: str | float | None = None
    ) -> list[PopularRate]:
        """Rates from the current base to a shortlist of common codes."""
        snapshot = self.state.snapshot
        if snapshot is None:
            return []

        try:
            value = parse_amount(
                self.state.amount_text if amount is None else amount
            )
        except InvalidAmount:
            value = 1.0

        popular = self.settings.POPULAR_CURRENCIES
        codes = [c for c in popular if c != snapshot.base]
        if snapshot.base in popular:
            extras = [
                c for c in self.state.known_currencies if c not in popular
            ]
            codes.extend(extras[: self.settings.EXTRA_POPULAR_LIMIT])

        rows: list[PopularRate] = []
        for code in codes[: self.settings.POPULAR_ROW_LIMIT]:
            rate = snapshot.rates.get(code)
            if rate is None:
                continue
            rows.append(
                PopularRate(
                    code=code,
                    name=currency_name(code),
                    rate=rate,
                    converted_amount=value * rate,
                )
            )
        return rows
