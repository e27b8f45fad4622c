# league_api/records_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from league_api.config import RECORDS_BASE_URL, RECORDS_ENABLED, RECORDS_TIMEOUT_SECONDS
from league_api.errors import ConflictError, LeagueError
from league_api.models import Player
from league_api.store import LeagueStore

logger = logging.getLogger(__name__)


class RecordsClientError(LeagueError):
    """Raised when the external record service call fails or is misconfigured."""
    kind = "RecordsClientError"
    status_code = 502


def get_json(endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Generic helper to call the record service (teams / players CRUD).

    The service is optional; only usable when RECORDS_ENABLED=1.
    """
    if not RECORDS_ENABLED:
        raise RecordsClientError("Record service is disabled (set RECORDS_ENABLED=1 to enable).")

    if not RECORDS_BASE_URL.startswith("http"):
        raise RecordsClientError("RECORDS_BASE_URL must start with http/https")

    url = f"{RECORDS_BASE_URL.rstrip('/')}/{endpoint.lstrip('/')}"

    try:
        resp = requests.get(url, params=dict(params or {}), timeout=RECORDS_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        raise RecordsClientError(f"Network error: {e}") from e

    if resp.status_code != 200:
        raise RecordsClientError(f"HTTP {resp.status_code}: {resp.text}")

    try:
        data = resp.json()
    except ValueError as e:
        raise RecordsClientError(f"Invalid JSON response: {e}") from e

    if not isinstance(data, dict):
        raise RecordsClientError("Unexpected response shape (expected an object)")

    return data


def fetch_team(team_id: str) -> Dict[str, Any]:
    data = get_json(f"teams/{team_id}")
    if not data.get("id") or not data.get("name"):
        raise RecordsClientError(f"Team payload for {team_id} is missing id/name")
    return data


def sync_team(store: LeagueStore, team_id: str) -> List[Player]:
    """
    Import a team and its roster from the record service into the store.
    Players already present (same id) are left as they are.
    """
    data = fetch_team(team_id)

    if data["id"] not in store.teams:
        store.add_team(data["name"], data.get("shortName"), team_id=data["id"])

    added: List[Player] = []
    for p in data.get("players") or []:
        pid = p.get("id")
        if not pid or pid in store.players:
            continue
        try:
            added.append(store.add_player(
                data["id"],
                p.get("name", ""),
                int(p.get("jerseyNumber", 0)),
                role=p.get("role") or "BATSMAN",
                player_id=pid,
            ))
        except ConflictError as e:
            logger.warning("Skipping player %s from record service: %s", pid, e.message)

    logger.info("Synced team %s from record service: %s new players", data["id"], len(added))
    return added
