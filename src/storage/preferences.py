# src/storage/preferences.py

"""Durable key/value preferences stored as a small JSON file."""

import json
import logging
from pathlib import Path

from src.config.settings import Settings

logger = logging.getLogger("currency_flow.storage")

_DEVELOPER_NAME_KEY = "developer_name"


class PreferenceStore:
    """Reads and writes user preferences in ``data/preferences.json``."""

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path or Settings.PREFERENCES_PATH

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning(
                "Ignoring unreadable preferences file %s: %s", self.path, exc
            )
            return {}
        if not isinstance(data, dict):
            logger.warning("Preferences file %s is not an object", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def get_developer_name(self, default: str | None = None) -> str:
        """Return the saved display name, or *default* when unset."""
        fallback = (
            default if default is not None else Settings.DEFAULT_DEVELOPER_NAME
        )
        return self._load().get(_DEVELOPER_NAME_KEY) or fallback

    def set_developer_name(self, name: str) -> bool:
        """Persist *name*; blank names are ignored and return ``False``."""
        name = name.strip()
        if not name:
            return False
        data = self._load()
        data[_DEVELOPER_NAME_KEY] = name
        self._save(data)
        logger.info("Developer name set to %r", name)
        return True
