# tests/test_chart_exporter.py

"""Tests for the Plotly chart renderer."""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from src.models.rates import ChartSpec
from src.storage.chart_exporter import PlotlyChartRenderer, build_rate_figure

_SPEC = ChartSpec(
    labels=["2024-03-04", "2024-03-05", "2024-03-06"],
    series=[0.921, 0.918, 0.925],
    title="USD to EUR Exchange Rate History",
    series_label="USD to EUR",
)


class TestBuildRateFigure(unittest.TestCase):
    """Figure construction from a chart spec."""

    def test_single_trace_with_title(self) -> None:
        fig = build_rate_figure(_SPEC)
        self.assertEqual(len(fig.data), 1)
        self.assertEqual(fig.data[0].name, "USD to EUR")
        self.assertEqual(list(fig.data[0].y), _SPEC.series)
        self.assertEqual(fig.layout.title.text, _SPEC.title)

    def test_min_max_annotations(self) -> None:
        fig = build_rate_figure(_SPEC)
        texts = [a.text for a in fig.layout.annotations]
        self.assertIn("Min: 0.9180", texts)
        self.assertIn("Max: 0.9250", texts)

    def test_empty_series_has_no_annotations(self) -> None:
        empty = ChartSpec(labels=[], series=[], title="t", series_label="s")
        fig = build_rate_figure(empty)
        self.assertEqual(len(fig.layout.annotations), 0)


class TestPlotlyChartRenderer(unittest.TestCase):
    """HTML export with destroy-and-recreate semantics."""

    def test_draw_writes_html(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            renderer = PlotlyChartRenderer(charts_dir=Path(tmp))
            renderer.draw(_SPEC)
            path = renderer.last_path
            assert path is not None
            self.assertTrue(path.exists())
            self.assertTrue(path.name.startswith("USD_to_EUR_"))
            self.assertIn("plotly", path.read_text().lower())

    def test_destroy_drops_figure(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            renderer = PlotlyChartRenderer(charts_dir=Path(tmp))
            renderer.draw(_SPEC)
            self.assertIsNotNone(renderer.figure)
            renderer.destroy()
            self.assertIsNone(renderer.figure)

    @patch("src.storage.chart_exporter.webbrowser")
    def test_open_browser(self, mock_wb: MagicMock) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            renderer = PlotlyChartRenderer(
                charts_dir=Path(tmp), open_browser=True
            )
            renderer.draw(_SPEC)
            assert renderer.last_path is not None
            mock_wb.open.assert_called_once_with(
                renderer.last_path.as_uri()
            )


if __name__ == "__main__":
    unittest.main()
