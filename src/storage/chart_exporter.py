# src/storage/chart_exporter.py

"""Render historical rate series as interactive Plotly HTML charts."""

import importlib
import logging
import webbrowser
from datetime import datetime
from pathlib import Path
from types import ModuleType
from typing import Any

from src.config.settings import Settings
from src.models.rates import ChartSpec

logger = logging.getLogger("currency_flow.chart")


def _get_plotly_go() -> ModuleType:
    """Import plotly.graph_objects lazily."""
    return importlib.import_module("plotly.graph_objects")


def build_rate_figure(spec: ChartSpec) -> Any:
    """Build a Plotly line chart for one rate series."""
    go = _get_plotly_go()
    fig: Any = go.Figure()
    fig.add_trace(go.Scatter(
        x=spec.labels,
        y=spec.series,
        mode="lines+markers",
        name=spec.series_label,
        line={"color": "#4361ee", "width": 2, "shape": "spline"},
        fill="tozeroy",
        fillcolor="rgba(67, 97, 238, 0.1)",
        hovertemplate="%{x}<br>Rate: %{y:.6f}<extra></extra>",
    ))

    if spec.series:
        low = min(spec.series)
        high = max(spec.series)
        fig.add_annotation(
            x=spec.labels[spec.series.index(low)], y=low,
            text=f"Min: {low:.4f}", showarrow=True, arrowhead=2,
        )
        fig.add_annotation(
            x=spec.labels[spec.series.index(high)], y=high,
            text=f"Max: {high:.4f}", showarrow=True, arrowhead=2,
        )
        # Rates sit far from zero; keep the fill from flattening the line
        pad = (high - low) * 0.1 or high * 0.01
        fig.update_yaxes(range=[low - pad, high + pad])

    fig.update_layout(
        title=spec.title,
        xaxis_title="Date",
        yaxis_title="Rate",
        hovermode="x unified",
        template="plotly_white",
        legend={"orientation": "h", "y": 1.1},
    )
    return fig


class PlotlyChartRenderer:
    """Chart renderer that writes each drawn series to an HTML file."""

    def __init__(
        self,
        charts_dir: Path | None = None,
        open_browser: bool = False,
    ) -> None:
        self.charts_dir = charts_dir or Settings.CHARTS_DIR
        self.open_browser = open_browser
        self.figure: Any = None
        self.last_path: Path | None = None

    def destroy(self) -> None:
        """Forget the current figure so the next draw starts clean."""
        self.figure = None

    def draw(self, spec: ChartSpec) -> None:
        self.figure = build_rate_figure(spec)
        self.charts_dir.mkdir(parents=True, exist_ok=True)
        slug = spec.series_label.replace(" ", "_")
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.charts_dir / f"{slug}_{stamp}.html"
        self.figure.write_html(str(filepath))
        self.last_path = filepath
        logger.info("Chart saved to %s", filepath)

        if self.open_browser:
            webbrowser.open(filepath.as_uri())
