# src/config/settings.py

"""Central configuration for the currency_flow converter."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the currency_flow converter."""

    # --- Rate provider ---
    API_BASE_URL: str = os.getenv(
        "FX_API_BASE_URL", "https://api.frankfurter.app"
    ).rstrip("/")
    REQUEST_TIMEOUT: int = int(os.getenv("FX_REQUEST_TIMEOUT", "5"))
    MAX_RETRIES: int = int(os.getenv("FX_MAX_RETRIES", "2"))
    RETRY_DELAY: float = 0.5            # Seconds, multiplied per attempt
    DEFAULT_BASE: str = os.getenv("FX_DEFAULT_BASE", "USD").upper()

    # --- HTTP ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Accept-Language": "en-US,en;q=0.9",
    }

    # --- Popular rates table ---
    POPULAR_CURRENCIES: list[str] = [
        "USD", "EUR", "GBP", "JPY", "CAD",
        "AUD", "CHF", "NZD", "HKD", "SGD",
    ]
    EXTRA_POPULAR_LIMIT: int = 3        # Backfill when base is popular
    POPULAR_ROW_LIMIT: int = 10

    # --- Historical chart ---
    LOOKBACK_WINDOWS: list[int] = [7, 30, 90, 180, 365]
    DEFAULT_LOOKBACK_DAYS: int = 30

    # --- Preferences ---
    DEFAULT_DEVELOPER_NAME: str = "Ankit Agrawal"

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    CHARTS_DIR: Path = DATA_DIR / "charts"
    PREFERENCES_PATH: Path = DATA_DIR / "preferences.json"
    LOGS_DIR: Path = BASE_DIR / "logs"
