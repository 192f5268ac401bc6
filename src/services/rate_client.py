# src/services/rate_client.py

"""Blocking HTTP client for the Frankfurter exchange-rate API."""

import logging
import time
from datetime import date
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.currency import format_day, normalize_code
from src.models.errors import NetworkError
from src.models.rates import HistoricalSeries, RatePoint, RateSnapshot

logger = logging.getLogger("currency_flow.client")

# Statuses worth another attempt; any other non-200 fails at once
_RETRYABLE_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


def _parse_day(raw: Any) -> date:
    try:
        return date.fromisoformat(str(raw))
    except ValueError:
        raise NetworkError(f"Malformed date in payload: {raw!r}") from None


def _parse_rate(code: str, raw: Any) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise NetworkError(f"Malformed rate for {code}: {raw!r}")
    if raw < 0:
        raise NetworkError(f"Negative rate for {code}: {raw!r}")
    return float(raw)


def parse_latest(payload: Any, requested_base: str) -> RateSnapshot:
    """Build a :class:`RateSnapshot` from a ``/latest`` response body.

    The provider omits the base's own rate; the snapshot adds it.
    """
    if not isinstance(payload, dict) or not isinstance(
        payload.get("rates"), dict
    ):
        raise NetworkError("Latest-rates payload has no 'rates' object")

    base = normalize_code(str(payload.get("base") or requested_base))
    rates = {
        normalize_code(code): _parse_rate(code, value)
        for code, value in payload["rates"].items()
    }
    return RateSnapshot(
        base=base,
        as_of=_parse_day(payload.get("date")),
        rates=rates,
    )


def parse_series(
    payload: Any, from_code: str, to_code: str
) -> HistoricalSeries:
    """Build a :class:`HistoricalSeries` from a date-range response body.

    Days that do not carry a rate for *to_code* are skipped.
    """
    if not isinstance(payload, dict) or not isinstance(
        payload.get("rates"), dict
    ):
        raise NetworkError("Series payload has no 'rates' object")

    points: list[RatePoint] = []
    for raw_day, day_rates in payload["rates"].items():
        if not isinstance(day_rates, dict) or to_code not in day_rates:
            continue
        points.append(
            RatePoint(
                day=_parse_day(raw_day),
                rate=_parse_rate(to_code, day_rates[to_code]),
            )
        )
    points.sort(key=lambda p: p.day)
    return HistoricalSeries(
        from_code=from_code, to_code=to_code, points=points
    )


class FrankfurterClient:
    """Fetches latest and historical rates, raising ``NetworkError``."""

    def __init__(self, base_url: str | None = None) -> None:
        self.settings = Settings()
        self.base_url = (base_url or self.settings.API_BASE_URL).rstrip("/")
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def _get_json(self, path: str, params: dict[str, str]) -> Any:
        """GET ``base_url/path`` with retries; return the decoded body."""
        url = f"{self.base_url}/{path}"
        attempts = max(1, self.settings.MAX_RETRIES)
        last_error = "no attempt made"

        for attempt in range(attempts):
            try:
                resp = self.session.get(
                    url,
                    params=params,
                    headers=self.settings.DEFAULT_HEADERS,
                    timeout=self._request_timeout,
                )
            except Exception as exc:
                last_error = f"request failed: {exc}"
                logger.warning(
                    "GET %s attempt %d failed: %s",
                    url,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
                time.sleep(self.settings.RETRY_DELAY * (attempt + 1))
                continue

            if resp.status_code == 200:
                try:
                    return resp.json()
                except ValueError as exc:
                    raise NetworkError(
                        f"Unparseable response from {url}: {exc}"
                    ) from exc

            last_error = f"HTTP {resp.status_code}"
            logger.warning(
                "GET %s returned HTTP %d on attempt %d",
                url,
                resp.status_code,
                attempt + 1,
            )
            if resp.status_code not in _RETRYABLE_STATUSES:
                raise NetworkError(
                    f"{url} answered HTTP {resp.status_code}",
                    status_code=resp.status_code,
                )
            time.sleep(self.settings.RETRY_DELAY * (attempt + 1))

        raise NetworkError(
            f"{url} unreachable after {attempts} attempt(s): {last_error}"
        )

    def fetch_latest(self, base: str) -> RateSnapshot:
        """Return the latest rates relative to *base*."""
        base = normalize_code(base)
        payload = self._get_json("latest", {"from": base})
        snapshot = parse_latest(payload, base)
        logger.info(
            "Fetched %d rates for %s (as of %s)",
            len(snapshot.rates),
            snapshot.base,
            snapshot.as_of,
        )
        return snapshot

    def fetch_series(
        self,
        from_code: str,
        to_code: str,
        start: date,
        end: date,
    ) -> HistoricalSeries:
        """Return daily *from_code*->*to_code* rates for ``start..end``."""
        from_code = normalize_code(from_code)
        to_code = normalize_code(to_code)
        path = f"{format_day(start)}..{format_day(end)}"
        payload = self._get_json(path, {"from": from_code, "to": to_code})
        series = parse_series(payload, from_code, to_code)
        logger.info(
            "Fetched %d points for %s->%s over %s",
            len(series),
            from_code,
            to_code,
            path,
        )
        return series
