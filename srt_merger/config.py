"""Configuration constants, processing defaults, and .env loading.

WHY: Centralizes every tunable value (default merge gap, split duration,
split characters, debounce window, statistics thresholds, session limits)
so they are easy to find and override per deployment without touching the
engines.

HOW: python-dotenv loads the .env file on import. Constants are module-level
values read from the environment with fallbacks. env_float() gives a clear
error naming the offending variable when a value is not a number.

RULES:
- Every default can be overridden via an SRT_MERGER_* environment variable
- Numeric variables are validated on import (ValueError names the variable)
- DEFAULT_SPLIT_METHOD is a plain string here; models.SplitMethod resolves it
- This module must not import from the rest of the package
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def env_float(name: str, default: float) -> float:
    """Read a float from the environment.

    RULES:
    - Missing or blank variable returns the default
    - Unparseable value raises ValueError naming the variable
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(
            "Environment variable {} must be a number, got '{}'".format(name, raw)
        )


def env_int(name: str, default: int) -> int:
    """Read an integer from the environment (same rules as env_float)."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            "Environment variable {} must be an integer, got '{}'".format(name, raw)
        )


# ---------------------------------------------------------------------------
# Processing defaults
# ---------------------------------------------------------------------------

DEFAULT_MAX_GAP = env_float("SRT_MERGER_MAX_GAP", 1.0)
"""Entries whose gap is below this many seconds are merged."""

DEFAULT_MAX_DURATION = env_float("SRT_MERGER_MAX_DURATION", 7.0)
"""Entries longer than this many seconds are split."""

DEFAULT_SPLIT_CHARACTERS = os.getenv("SRT_MERGER_SPLIT_CHARACTERS", "\n.,;:!?…")
"""Characters after which a caption may be cut (line break + punctuation)."""

DEFAULT_SPLIT_METHOD = os.getenv("SRT_MERGER_SPLIT_METHOD", "characters").strip().lower()

DEFAULT_DEBOUNCE_SECONDS = env_float("SRT_MERGER_DEBOUNCE_SECONDS", 0.2)
"""Quiet window before a parameter change triggers a recompute."""

# ---------------------------------------------------------------------------
# Statistics thresholds
# ---------------------------------------------------------------------------

LONG_ENTRY_SECONDS = env_float("SRT_MERGER_LONG_ENTRY_SECONDS", 7.0)
SMALL_GAP_SECONDS = env_float("SRT_MERGER_SMALL_GAP_SECONDS", 0.1)

# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("SRT_MERGER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

SESSION_TTL_SECONDS = env_int("SRT_MERGER_SESSION_TTL", 3600)
MAX_SESSIONS = env_int("SRT_MERGER_MAX_SESSIONS", 100)

SRT_EXTENSIONS: set[str] = {".srt", ".txt"}
"""File extensions accepted for upload (lowercase, with dot)."""
