# league_api/config.py
from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _get_env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_optional_int(name: str) -> Optional[int]:
    raw = _get_env(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


# -------------------------
# Match rules
# -------------------------
OVERS_PER_INNINGS: int = _get_env_int("LEAGUE_OVERS_PER_INNINGS", 20)
MAX_WICKETS: int = _get_env_int("LEAGUE_MAX_WICKETS", 10)
MAX_RUNS_PER_BALL: int = _get_env_int("LEAGUE_MAX_RUNS_PER_BALL", 7)

MIN_OVERS_PER_INNINGS = 5
MAX_OVERS_PER_INNINGS = 50


# -------------------------
# Tournament rules
# -------------------------
DEFAULT_MIN_TEAMS: int = _get_env_int("LEAGUE_MIN_TEAMS", 4)
DEFAULT_MAX_TEAMS: int = _get_env_int("LEAGUE_MAX_TEAMS", 16)
TEAM_LIMIT_CEILING = 16

# If unset, knockout pairings use a fresh random.Random()
KNOCKOUT_SEED: Optional[int] = _get_env_optional_int("LEAGUE_KNOCKOUT_SEED")


# -------------------------
# Logging
# -------------------------
LOG_LEVEL: str = _get_env("LEAGUE_LOG_LEVEL", "INFO").upper()


# -------------------------
# External record service (OPTIONAL)
# -------------------------
# If 0, the in-memory registry is the only source of teams/players
RECORDS_ENABLED: bool = _get_env("RECORDS_ENABLED", "0") == "1"
RECORDS_BASE_URL: str = _get_env("RECORDS_BASE_URL", "http://localhost:3000/api")
RECORDS_TIMEOUT_SECONDS: int = _get_env_int("RECORDS_TIMEOUT_SECONDS", 12)


def validate_config() -> None:
    if OVERS_PER_INNINGS <= 0:
        raise RuntimeError("LEAGUE_OVERS_PER_INNINGS must be positive")

    if MAX_WICKETS <= 0:
        raise RuntimeError("LEAGUE_MAX_WICKETS must be positive")

    if MAX_RUNS_PER_BALL <= 0:
        raise RuntimeError("LEAGUE_MAX_RUNS_PER_BALL must be positive")

    # Team limits
    if DEFAULT_MIN_TEAMS < 2:
        raise RuntimeError("LEAGUE_MIN_TEAMS must be at least 2")

    if DEFAULT_MIN_TEAMS > DEFAULT_MAX_TEAMS:
        raise RuntimeError("LEAGUE_MIN_TEAMS must not exceed LEAGUE_MAX_TEAMS")

    if DEFAULT_MAX_TEAMS > TEAM_LIMIT_CEILING:
        raise RuntimeError(f"LEAGUE_MAX_TEAMS must not exceed {TEAM_LIMIT_CEILING}")

    # If enabled, enforce a usable URL
    if RECORDS_ENABLED:
        if not RECORDS_BASE_URL.startswith("http"):
            raise RuntimeError("RECORDS_BASE_URL must start with http/https when RECORDS_ENABLED=1")

        if RECORDS_TIMEOUT_SECONDS <= 0:
            raise RuntimeError("RECORDS_TIMEOUT_SECONDS must be positive")
