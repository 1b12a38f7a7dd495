"""Configuration management for the house expenses dashboard.

This module centralizes all configuration values including paths,
API settings, display defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in house_expenses/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("HOUSE_EXPENSES_DATA_DIR", _PROJECT_ROOT / "data"))
EXPORTS_DIR = DATA_DIR / "exports"

# Local key-value state (last checked month, UI preferences)
STATE_PATH = Path(
    os.getenv("HOUSE_EXPENSES_STATE_PATH", DATA_DIR / "local_state.json")
).resolve()

# Backend API
API_BASE_URL = os.getenv("HOUSE_EXPENSES_API_URL", "http://localhost:8080/api").rstrip("/")
API_TIMEOUT = float(os.getenv("HOUSE_EXPENSES_API_TIMEOUT", "30"))
API_TOKEN = os.getenv("HOUSE_EXPENSES_API_TOKEN") or None
DEFAULT_PAGE_SIZE = 20

# Budget card colour bands (percent of the limit)
WARNING_PERCENT = 75.0
DANGER_PERCENT = 90.0

# Currency display
CURRENCY = "EUR"
CURRENCY_SYMBOL = "€"

# The dashboard calendar does not navigate before this (year, month)
CALENDAR_START = (2026, 1)


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, EXPORTS_DIR]:
        directory.mkdir(parents=True, exist_ok=True)
