# src/ui/app.py

"""Terminal UI for the currency_flow converter."""

import logging
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any, TypeVar, cast

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    LoadingIndicator,
    Select,
    Sparkline,
    Static,
)

from src.config.settings import Settings
from src.models.currency import format_amount, format_rate
from src.models.rates import ChartSpec, build_chart_spec
from src.services.history_viewer import HistoryViewer
from src.services.rate_client import FrankfurterClient
from src.services.rate_store import ConversionDisplay, RateStore
from src.storage.chart_exporter import PlotlyChartRenderer
from src.storage.preferences import PreferenceStore

logger = logging.getLogger("currency_flow.ui")

_T = TypeVar("_T")


def _lookback_label(days: int) -> str:
    return "1 Year" if days == 365 else f"{days} Days"


class ErrorScreen(ModalScreen[bool]):
    """Blocking notice for a failed rate fetch; dismisses with retry flag."""

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label("Error fetching exchange rates", id="error_title"),
            Static(
                "Please check your internet connection and try again. "
                f"Details: {self.message}",
                id="error_details",
            ),
            Horizontal(
                Button("Retry", variant="primary", id="error_retry_btn"),
                Button("Close", id="error_close_btn"),
                id="error_buttons",
            ),
            id="error_dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "error_retry_btn")


class SparklineRenderer:
    """Chart renderer drawing into the TUI chart panel."""

    def __init__(self, app: "CurrencyFlowApp") -> None:
        self.app = app

    def destroy(self) -> None:
        self.app.query_one("#chart_spark", Sparkline).data = []
        self.app.query_one("#chart_title", Static).update("")
        self.app.query_one("#chart_range", Static).update("")

    def draw(self, spec: ChartSpec) -> None:
        self.app.query_one("#chart_title", Static).update(spec.title)
        self.app.query_one("#chart_spark", Sparkline).data = spec.series
        if spec.series:
            summary = (
                f"{spec.labels[0]} .. {spec.labels[-1]}  "
                f"low {format_rate(min(spec.series))}  "
                f"high {format_rate(max(spec.series))}  "
                f"({len(spec.series)} days)"
            )
        else:
            summary = "No data for this range"
        self.app.query_one("#chart_range", Static).update(summary)


class CurrencyFlowApp(App[object]):
    """Terminal UI for the currency_flow converter."""

    CSS_PATH = "styles.css"
    TITLE = "CurrencyFlow"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("s", "swap", "Swap"),
        Binding("c", "copy_result", "Copy Result"),
        Binding("h", "toggle_chart", "Chart"),
        Binding("o", "open_chart", "Open Chart"),
    ]

    def __init__(
        self,
        client: FrankfurterClient | None = None,
        preferences: PreferenceStore | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        super().__init__()
        self.settings = Settings()
        client = client or FrankfurterClient()
        self.store = RateStore(client)
        self.viewer = HistoryViewer(
            client,
            renderer=SparklineRenderer(self),
            today=today or date.today,
        )
        self.preferences = preferences or PreferenceStore()
        self._listed_codes: list[str] = []

    def compose(self) -> ComposeResult:
        """Build the widget tree for the TUI."""
        lookback_options = [
            (_lookback_label(d), d) for d in self.settings.LOOKBACK_WINDOWS
        ]

        yield Header()
        yield Container(
            Static("💱 CurrencyFlow - Real-Time Currency Converter", id="title"),
            Horizontal(
                Select[str]([], prompt="From", id="from_select"),
                Button("⇄", id="swap_btn"),
                Select[str]([], prompt="To", id="to_select"),
                id="pair_bar",
            ),
            Horizontal(
                Input(value="1", placeholder="Amount", id="amount_input"),
                Input(placeholder="Result", id="result_output", disabled=True),
                Button("Copy", id="copy_btn"),
                id="amount_bar",
            ),
            Horizontal(
                Static("", id="rate_info"),
                Button("Show Chart", id="chart_btn"),
                id="rate_bar",
            ),
            Static("", id="last_updated"),
            LoadingIndicator(id="loader"),
            Container(
                Horizontal(
                    Static("", id="chart_title"),
                    Select[int](
                        lookback_options,
                        value=self.settings.DEFAULT_LOOKBACK_DAYS,
                        allow_blank=False,
                        id="lookback_select",
                    ),
                    id="chart_header",
                ),
                LoadingIndicator(id="chart_loader"),
                Sparkline([], id="chart_spark"),
                Static("", id="chart_range"),
                Horizontal(
                    Static("", id="chart_error_text"),
                    Button("Retry", variant="error", id="chart_retry_btn"),
                    Button("Dismiss", id="chart_dismiss_btn"),
                    id="chart_error",
                ),
                id="chart_panel",
            ),
            Static("", id="popular_title"),
            cast(
                DataTable[str],
                DataTable(
                    id="popular_table",
                    zebra_stripes=True,
                    cursor_type="row",
                ),
            ),
            Horizontal(
                Static("", id="developer_name"),
                Input(
                    placeholder="Change developer name, press Enter",
                    id="developer_input",
                ),
                id="developer_bar",
            ),
            id="main_container",
        )
        yield Footer()

    async def on_mount(self) -> None:
        """Configure static widgets, then load the default base."""
        table = cast(
            DataTable[str],
            self.query_one("#popular_table", DataTable),
        )
        table.add_columns("Currency", "Code", "Rate", "Amount")
        self.query_one("#loader", LoadingIndicator).display = False
        self.query_one("#chart_loader", LoadingIndicator).display = False
        self.query_one("#chart_panel", Container).display = False
        self.query_one("#chart_error", Horizontal).display = False
        self._show_developer_name()

        self.store.state.from_code = self.settings.DEFAULT_BASE
        await self.refresh_conversion()

    # ── Conversion flow ──────────────────────────────────

    async def _run_store(
        self, operation: Awaitable[ConversionDisplay | None]
    ) -> None:
        """Await a store handler with the loader shown, then redraw."""
        loader = self.query_one("#loader", LoadingIndicator)
        loader.display = True
        try:
            display = await operation
        finally:
            loader.display = False
        self._apply_display(display)

    async def refresh_conversion(self) -> None:
        await self._run_store(self.store.recompute())

    def _apply_display(self, display: ConversionDisplay | None) -> None:
        if display is None:
            return  # superseded by a newer fetch
        self._sync_selects()
        self.query_one("#result_output", Input).value = display.result_text

        state = self.store.state
        if display.result is not None:
            result = display.result
            self.query_one("#rate_info", Static).update(
                f"1 {result.from_code} = {result.display_rate} {result.to_code}"
            )
        if state.snapshot is not None:
            self.query_one("#last_updated", Static).update(
                f"Last updated: {state.snapshot.as_of:%Y-%m-%d}"
            )
        self.populate_popular_table()

        if display.status == "network_error":
            self.push_screen(
                ErrorScreen(state.last_error), self._on_error_closed
            )

    def _on_error_closed(self, retry: bool | None) -> None:
        if retry:
            self.run_worker(self.refresh_conversion())

    def _sync_selects(self) -> None:
        """Mirror known currencies and selected codes into the dropdowns."""
        state = self.store.state
        refresh_options = state.known_currencies != self._listed_codes
        self._listed_codes = list(state.known_currencies)
        options = [(code, code) for code in state.known_currencies]
        for select_id, code in (
            ("#from_select", state.from_code),
            ("#to_select", state.to_code),
        ):
            select = cast(Select[str], self.query_one(select_id, Select))
            if refresh_options:
                select.set_options(options)
            if code in state.known_currencies and select.value != code:
                select.value = code

    def populate_popular_table(self) -> None:
        """Fill the popular rates table for the current base and amount."""
        table = cast(
            DataTable[str],
            self.query_one("#popular_table", DataTable),
        )
        table.clear()
        snapshot = self.store.state.snapshot
        if snapshot is None:
            return
        self.query_one("#popular_title", Static).update(
            f"Popular rates for {snapshot.base}"
        )
        for row in self.store.popular_rates():
            table.add_row(
                row.name,
                row.code,
                format_rate(row.rate),
                format_amount(row.converted_amount),
            )

    async def _run_viewer(self, operation: Awaitable[_T]) -> _T:
        """Await a chart viewer call with the panel's loader shown."""
        loader = self.query_one("#chart_loader", LoadingIndicator)
        loader.display = self.viewer.visible
        try:
            return await operation
        finally:
            loader.display = False
            self._show_chart_error()

    async def _update_chart_pair(self) -> None:
        state = self.store.state
        await self._run_viewer(
            self.viewer.on_parameters_changed(state.from_code, state.to_code)
        )

    async def on_select_changed(self, event: Select.Changed) -> None:
        """Dispatch dropdown changes to the store or the chart viewer."""
        state = self.store.state
        value: Any = event.value
        if event.select.id == "lookback_select":
            if isinstance(value, int) and value != self.viewer.lookback_days:
                await self._run_viewer(
                    self.viewer.on_parameters_changed(
                        state.from_code, state.to_code, value
                    )
                )
            return
        if not isinstance(value, str):
            return
        if event.select.id == "from_select" and value != state.from_code:
            await self._run_store(self.store.select_from(value))
            await self._update_chart_pair()
        elif event.select.id == "to_select" and value != state.to_code:
            await self._run_store(self.store.select_to(value))
            await self._update_chart_pair()

    async def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "amount_input":
            if event.value != self.store.state.amount_text:
                await self._run_store(self.store.set_amount(event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "developer_input":
            if self.preferences.set_developer_name(event.value):
                event.input.value = ""
                self._show_developer_name()
                self.notify("Name saved")
            else:
                self.notify("Name cannot be empty", severity="warning")

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button click events."""
        button_id = event.button.id
        if button_id == "swap_btn":
            await self.action_swap()
        elif button_id == "copy_btn":
            self.action_copy_result()
        elif button_id == "chart_btn":
            await self.action_toggle_chart()
        elif button_id == "chart_retry_btn":
            await self._run_viewer(self.viewer.retry())
        elif button_id == "chart_dismiss_btn":
            self.viewer.dismiss_error()
            self._show_chart_error()

    # ── Actions ──────────────────────────────────────────

    async def action_swap(self) -> None:
        """Swap the from and to currencies."""
        await self._run_store(self.store.swap())
        await self._update_chart_pair()

    def action_copy_result(self) -> None:
        """Copy the result field to the clipboard."""
        text = self.query_one("#result_output", Input).value
        if not text:
            self.notify("Nothing to copy", severity="warning")
            return
        try:
            import pyperclip  # type: ignore[import-untyped]

            pyperclip.copy(text)
            self.notify(f"Copied {text}")
        except Exception:
            logger.error("Failed to copy result to clipboard", exc_info=True)
            self.notify("Install pyperclip", severity="warning")

    async def action_toggle_chart(self) -> None:
        """Show the chart panel (loading its series) or hide it."""
        state = self.store.state
        panel = self.query_one("#chart_panel", Container)
        if not self.viewer.visible:
            panel.display = True
            self.query_one("#chart_loader", LoadingIndicator).display = True
        try:
            visible = await self.viewer.toggle(state.from_code, state.to_code)
        finally:
            self.query_one("#chart_loader", LoadingIndicator).display = False
        panel.display = visible
        self.query_one("#chart_btn", Button).label = (
            "Hide Chart" if visible else "Show Chart"
        )
        self._show_chart_error()

    def action_open_chart(self) -> None:
        """Export the loaded series to an HTML chart in the browser."""
        series = self.viewer.series
        if series is None or not series.points:
            self.notify("Open the chart panel first", severity="warning")
            return
        try:
            renderer = PlotlyChartRenderer(open_browser=True)
            renderer.draw(build_chart_spec(series))
            self.notify(f"Chart saved to {renderer.last_path}")
        except Exception as e:
            logger.error("Failed to export chart", exc_info=True)
            self.notify(f"Chart export failed: {e}", severity="error")

    # ── Helpers ──────────────────────────────────────────

    def _show_chart_error(self) -> None:
        banner = self.query_one("#chart_error", Horizontal)
        error = self.viewer.error
        banner.display = error is not None
        if error is not None:
            self.query_one("#chart_error_text", Static).update(
                f"Failed to load chart data: {error.message}"
            )

    def _show_developer_name(self) -> None:
        name = self.preferences.get_developer_name()
        self.query_one("#developer_name", Static).update(
            f"Developed by {name}"
        )
