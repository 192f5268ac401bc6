# main.py

"""Entry point for the currency_flow converter (TUI or headless CLI)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("currency_flow.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    windows = ", ".join(str(d) for d in Settings.LOOKBACK_WINDOWS)

    parser = argparse.ArgumentParser(
        prog="currency_flow",
        description="Real-time currency converter backed by Frankfurter.",
        epilog=f"History windows (days): {windows}",
    )
    parser.add_argument(
        "amount",
        nargs="?",
        default=None,
        help="Amount to convert. Omit to launch the interactive TUI.",
    )
    parser.add_argument(
        "-f",
        "--from",
        default=Settings.DEFAULT_BASE,
        dest="from_code",
        help=f"Source currency code (default: {Settings.DEFAULT_BASE}).",
    )
    parser.add_argument(
        "-t",
        "--to",
        default=None,
        dest="to_code",
        help="Target currency code (default: EUR, or USD from EUR).",
    )
    parser.add_argument(
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--popular",
        action="store_true",
        default=False,
        help="Include the popular rates table.",
    )
    parser.add_argument(
        "--history",
        type=int,
        default=None,
        metavar="DAYS",
        help="Export a FROM->TO rate history chart for DAYS days.",
    )
    parser.add_argument(
        "--no-browser",
        action="store_false",
        default=True,
        dest="open_browser",
        help="Do not open the exported chart in a browser.",
    )
    parser.add_argument(
        "--set-name",
        default=None,
        dest="developer_name",
        help="Save the developer name shown in the TUI.",
    )
    return parser


def _run_tui() -> None:
    """Launch the interactive Textual TUI."""
    from src.ui.app import CurrencyFlowApp

    try:
        app = CurrencyFlowApp()
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("currency_flow TUI shutting down")


def _run_convert(args: argparse.Namespace) -> None:
    """Run one headless conversion and exit."""
    from src.cli.runner import cli_convert

    exit_code = asyncio.run(
        cli_convert(
            amount=args.amount,
            from_code=args.from_code,
            to_code=args.to_code,
            output_format=args.output_format,
            show_popular=args.popular,
        )
    )
    sys.exit(exit_code)


def _run_history(args: argparse.Namespace) -> None:
    """Export a historical rate chart and exit."""
    from src.cli.runner import cli_history
    from src.services.rate_store import default_to_code

    from_code = args.from_code.upper()
    exit_code = asyncio.run(
        cli_history(
            from_code=from_code,
            to_code=args.to_code or default_to_code(from_code),
            lookback_days=args.history,
            open_browser=args.open_browser,
        )
    )
    sys.exit(exit_code)


def _run_set_name(name: str) -> None:
    from src.cli.runner import run_set_name

    sys.exit(run_set_name(name))


def main() -> None:
    """Route to TUI (no args) or one of the headless commands."""
    parser = _build_parser()
    args = parser.parse_args()
    headless = (
        args.amount is not None
        or args.history is not None
        or args.developer_name is not None
    )
    log_file = setup_logging(console=headless)
    logger.info("currency_flow starting (log file: %s)", log_file)

    if args.developer_name is not None:
        _run_set_name(args.developer_name)
    elif args.history is not None:
        _run_history(args)
    elif args.amount is None:
        _run_tui()
    else:
        _run_convert(args)


if __name__ == "__main__":
    main()
