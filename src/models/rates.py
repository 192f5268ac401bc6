# src/models/rates.py

"""Rate snapshot, conversion and historical series models."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType

from src.models.currency import format_amount, format_day, format_rate


@dataclass(frozen=True)
class RateSnapshot:
    """All rates for one base currency as published on ``as_of``.

    ``rates[code]`` is how many units of *code* one unit of *base*
    buys.  The base itself is always present with rate ``1.0``.
    """

    base: str
    as_of: date
    rates: Mapping[str, float]

    def __post_init__(self) -> None:
        rates = dict(self.rates)
        rates[self.base] = 1.0
        object.__setattr__(self, "rates", MappingProxyType(rates))

    @property
    def codes(self) -> list[str]:
        """Sorted currency codes covered by this snapshot."""
        return sorted(self.rates)


@dataclass(frozen=True)
class ConversionRequest:
    """A single amount to convert between two codes."""

    from_code: str
    to_code: str
    amount: float


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting an amount against the current snapshot."""

    from_code: str
    to_code: str
    amount: float
    converted_amount: float
    rate_used: float

    @property
    def display_amount(self) -> str:
        return format_amount(self.converted_amount)

    @property
    def display_rate(self) -> str:
        return format_rate(self.rate_used)


@dataclass(frozen=True)
class PopularRate:
    """One row of the popular rates table."""

    code: str
    name: str
    rate: float
    converted_amount: float


@dataclass(frozen=True)
class RatePoint:
    """A single daily observation in a historical series."""

    day: date
    rate: float


@dataclass
class HistoricalSeries:
    """Daily rates for one currency pair, ordered by date."""

    from_code: str
    to_code: str
    points: list[RatePoint] = field(
        default_factory=lambda: list[RatePoint]()
    )

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class ChartSpec:
    """Everything a chart renderer needs to draw one series."""

    labels: list[str]
    series: list[float]
    title: str
    series_label: str


def build_chart_spec(series: HistoricalSeries) -> ChartSpec:
    """Translate a historical series into the renderer contract."""
    pair = f"{series.from_code} to {series.to_code}"
    return ChartSpec(
        labels=[format_day(p.day) for p in series.points],
        series=[p.rate for p in series.points],
        title=f"{pair} Exchange Rate History",
        series_label=pair,
    )
