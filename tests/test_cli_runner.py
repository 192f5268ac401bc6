# tests/test_cli_runner.py

"""Tests for the headless CLI commands."""

import io
import json
import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock, patch

from src.cli.runner import cli_convert, cli_history, run_set_name
from src.models.errors import NetworkError
from src.models.rates import HistoricalSeries, RatePoint, RateSnapshot


def _client() -> MagicMock:
    client = MagicMock()
    client.fetch_latest.return_value = RateSnapshot(
        base="USD",
        as_of=date(2024, 3, 8),
        rates={"EUR": 0.92, "JPY": 150.1, "GBP": 0.79},
    )
    client.fetch_series.return_value = HistoricalSeries(
        "USD",
        "EUR",
        [RatePoint(date(2024, 3, 4), 0.921), RatePoint(date(2024, 3, 5), 0.918)],
    )
    return client


class TestCliConvert(unittest.IsolatedAsyncioTestCase):
    """``main.py AMOUNT -f FROM -t TO``."""

    async def test_json_output(self) -> None:
        with patch("sys.stdout", new_callable=io.StringIO) as out:
            code = await cli_convert(
                "100", "usd", "eur", "json", client=_client()
            )
        self.assertEqual(code, 0)
        data = json.loads(out.getvalue())
        self.assertEqual(data["from"], "USD")
        self.assertEqual(data["to"], "EUR")
        self.assertEqual(data["converted_amount"], "92.0000")
        self.assertEqual(data["rate"], "0.920000")
        self.assertNotIn("popular", data)

    async def test_default_target_and_popular_rows(self) -> None:
        with patch("sys.stdout", new_callable=io.StringIO) as out:
            code = await cli_convert(
                "2", "USD", None, "json", show_popular=True, client=_client()
            )
        self.assertEqual(code, 0)
        data = json.loads(out.getvalue())
        self.assertEqual(data["to"], "EUR")
        codes = [row["code"] for row in data["popular"]]
        self.assertEqual(codes, ["EUR", "GBP", "JPY"])

    async def test_table_output(self) -> None:
        code = await cli_convert(
            "10", "USD", "JPY", "table", show_popular=True, client=_client()
        )
        self.assertEqual(code, 0)

    async def test_invalid_amount_exits_nonzero(self) -> None:
        client = _client()
        code = await cli_convert("-5", "USD", "EUR", "json", client=client)
        self.assertEqual(code, 1)
        client.fetch_latest.assert_not_called()

    async def test_unavailable_rate_exits_nonzero(self) -> None:
        code = await cli_convert("5", "USD", "ISK", "json", client=_client())
        self.assertEqual(code, 1)

    async def test_network_error_exits_nonzero(self) -> None:
        client = _client()
        client.fetch_latest.side_effect = NetworkError("offline")
        code = await cli_convert("5", "USD", "EUR", "json", client=client)
        self.assertEqual(code, 1)


class TestCliHistory(unittest.IsolatedAsyncioTestCase):
    """``main.py --history DAYS``."""

    async def test_exports_chart(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with patch("src.storage.chart_exporter.Settings.CHARTS_DIR", Path(tmp)):
                code = await cli_history(
                    "USD", "EUR", 7, open_browser=False, client=_client()
                )
            self.assertEqual(code, 0)
            self.assertEqual(len(list(Path(tmp).glob("*.html"))), 1)

    async def test_unsupported_window(self) -> None:
        client = _client()
        code = await cli_history("USD", "EUR", 14, client=client)
        self.assertEqual(code, 1)
        client.fetch_series.assert_not_called()

    async def test_network_error(self) -> None:
        client = _client()
        client.fetch_series.side_effect = NetworkError("offline")
        code = await cli_history(
            "USD", "EUR", 30, open_browser=False, client=client
        )
        self.assertEqual(code, 1)

    async def test_empty_series(self) -> None:
        client = _client()
        client.fetch_series.return_value = HistoricalSeries("USD", "EUR", [])
        code = await cli_history(
            "USD", "EUR", 30, open_browser=False, client=client
        )
        self.assertEqual(code, 1)


class TestRunSetName(unittest.TestCase):
    """``main.py --set-name NAME``."""

    def test_saves_name(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "preferences.json"
            with patch("src.storage.preferences.Settings.PREFERENCES_PATH", path):
                self.assertEqual(run_set_name("Sam"), 0)
            self.assertIn("Sam", path.read_text(encoding="utf-8"))

    def test_blank_name_fails(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "preferences.json"
            with patch("src.storage.preferences.Settings.PREFERENCES_PATH", path):
                self.assertEqual(run_set_name("  "), 1)
            self.assertFalse(path.exists())


if __name__ == "__main__":
    unittest.main()
