"""Runtime configuration for focalplan.

Values come from the environment (optionally a `.env` file) with defaults
suitable for local development.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


# Database URL - SQLite by default (local dev)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./focalplan.db")
DEBUG = os.getenv("DEBUG", "False").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "info").lower()

# Placement: free gaps shorter than this are not worth showing
MIN_FREE_GAP_MINUTES = _int_env("MIN_FREE_GAP_MINUTES", 5)

# Day window used by the HTTP host when computing free intervals
DAY_START_HOUR = _int_env("DAY_START_HOUR", 6)
DAY_END_HOUR = _int_env("DAY_END_HOUR", 22)

# Calm Mode: number of "up next" todos shown before "show all"
UP_NEXT_LIMIT = _int_env("UP_NEXT_LIMIT", 5)

# Energy gauge: load that maps to a full (100) gauge
ENERGY_CAPACITY = _int_env("ENERGY_CAPACITY", 20)
