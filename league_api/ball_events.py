# league_api/ball_events.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from league_api.config import MAX_RUNS_PER_BALL
from league_api.errors import ValidationError
from league_api.models import INNINGS_NUMBERS, BallEvent

# -----------------------------
# Event codes
# -----------------------------
RUN_CODES = ("0", "1", "2", "3", "4", "5", "6")
WICKET = "W"
WIDE = "WD"
NO_BALL = "NB"
LEG_BYE = "LB"
BYE = "BY"
CARRY = "CB"

EVENT_CODES = RUN_CODES + (WICKET, WIDE, NO_BALL, LEG_BYE, BYE, CARRY)

# Deliveries that do not count towards the over
ILLEGAL_CODES = frozenset({WIDE, NO_BALL})

# Extras the bowler is charged for (byes / leg-byes / carries are not)
BOWLER_CHARGED_EXTRAS = frozenset({WIDE, NO_BALL})

EXTRA_CODES = frozenset({WIDE, NO_BALL, LEG_BYE, BYE, CARRY})


@dataclass(frozen=True)
class Delivery:
    """
    Classified outcome of one ball, derived from (event, runs, wickets).

    bat_runs       runs credited to the striker
    extras         runs credited to the batting side as extras
    completed_runs runs physically run / hit (drives strike rotation);
                   the automatic penalty run of a wide / no-ball is excluded
    bowler_runs    runs charged against the bowler
    """
    event: str
    legal: bool
    bat_runs: int
    extras: int
    wicket: int
    completed_runs: int
    bowler_runs: int

    @property
    def total_runs(self) -> int:
        return self.bat_runs + self.extras

    @property
    def is_wicket(self) -> bool:
        return self.wicket == 1

    @property
    def rotates_strike(self) -> bool:
        return not self.is_wicket and self.completed_runs % 2 == 1


def _check_runs_range(event: str, runs: int, *, minimum: int) -> None:
    if runs < minimum:
        raise ValidationError(
            f"Event '{event}' requires runs >= {minimum} (got {runs})",
            details={"event": event, "runs": runs},
        )
    if runs > MAX_RUNS_PER_BALL:
        raise ValidationError(
            f"Runs on a single delivery cannot exceed {MAX_RUNS_PER_BALL} (got {runs})",
            details={"event": event, "runs": runs},
        )


def classify(event: str, runs: Optional[int] = None, wickets: Optional[int] = None) -> Delivery:
    """
    Validates an event code with its runs / wickets and returns the Delivery.

    Rules:
    - 0..6  : runs must equal the code (defaulted when omitted), no wicket
    - W     : runs 0, wickets 1 (defaulted when omitted)
    - WD/NB : illegal delivery, runs >= 1 (default 1), all extras, bowler charged
    - LB/BY/CB : legal delivery, runs >= 1 (default 1), all extras, bowler not charged
    """
    if event not in EVENT_CODES:
        raise ValidationError(
            f"Invalid event code: {event!r}",
            details={"allowed": list(EVENT_CODES)},
        )

    if wickets is not None and wickets not in (0, 1):
        raise ValidationError(f"wickets must be 0 or 1 (got {wickets})")

    if event == WICKET:
        if wickets == 0:
            raise ValidationError("A 'W' event must carry wickets=1")
        if runs not in (None, 0):
            raise ValidationError(f"A 'W' event cannot carry runs (got {runs})")
        return Delivery(event, True, 0, 0, 1, 0, 0)

    if wickets == 1:
        raise ValidationError(f"wickets=1 is only valid with event 'W' (got '{event}')")

    if event in RUN_CODES:
        value = int(event)
        if runs is not None and runs != value:
            raise ValidationError(
                f"Event '{event}' must carry runs={value} (got {runs})",
                details={"event": event, "runs": runs},
            )
        return Delivery(event, True, value, 0, 0, value, value)

    extra_runs = 1 if runs is None else int(runs)
    _check_runs_range(event, extra_runs, minimum=1)

    legal = event not in ILLEGAL_CODES
    completed = extra_runs if legal else extra_runs - 1
    bowler_runs = extra_runs if event in BOWLER_CHARGED_EXTRAS else 0
    return Delivery(event, legal, 0, extra_runs, 0, completed, bowler_runs)


def classify_event(ball: BallEvent) -> Delivery:
    """Re-derive the Delivery of an already recorded BallEvent."""
    return classify(ball.event, ball.runs, ball.wickets)


def validate_labels(inning: str, over: int, ball: int, batsman_id: str, bowler_id: str,
                    non_striker_id: Optional[str] = None) -> None:
    """Shape checks that do not need match / innings state."""
    if inning not in INNINGS_NUMBERS:
        raise ValidationError(f"inning must be one of {list(INNINGS_NUMBERS)} (got {inning!r})")

    if over < 1:
        raise ValidationError(f"over must be >= 1 (got {over})")

    # no upper bound: wides and no-balls push the label past 6
    if ball < 1:
        raise ValidationError(f"ball must be >= 1 (got {ball})")

    if not batsman_id or not batsman_id.strip():
        raise ValidationError("batsman_id is required")

    if not bowler_id or not bowler_id.strip():
        raise ValidationError("bowler_id is required")

    if non_striker_id is not None and non_striker_id == batsman_id:
        raise ValidationError("non_striker_id must differ from batsman_id")

    if bowler_id in (batsman_id, non_striker_id):
        raise ValidationError("bowler cannot also be batting")


def extras_breakdown(deliveries) -> Dict[str, int]:
    """Extras per code (WD, NB, LB, BY, CB) over an iterable of Delivery."""
    out: Dict[str, int] = {code: 0 for code in (WIDE, NO_BALL, LEG_BYE, BYE, CARRY)}
    for d in deliveries:
        if d.extras:
            out[d.event] += d.extras
    return out
