# league_api/errors.py
from __future__ import annotations

from typing import Any, Dict, Optional


class LeagueError(Exception):
    """
    Base class for every classified failure raised by the scoring and
    tournament engines. main.py maps `status_code` onto the HTTP response.
    """
    kind = "LeagueError"
    status_code = 500

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class NotFoundError(LeagueError):
    """A match / innings / team / player / tournament reference does not exist."""
    kind = "NotFound"
    status_code = 404


class InvalidStateError(LeagueError):
    """The record exists but is not in a state that allows the operation."""
    kind = "InvalidState"
    status_code = 409


class ValidationError(LeagueError, ValueError):
    """Malformed input: event codes, over/ball numbers, jersey numbers, amounts."""
    kind = "ValidationError"
    status_code = 400


class ConflictError(LeagueError):
    """Duplicate / overlapping resource."""
    kind = "ConflictError"
    status_code = 409
