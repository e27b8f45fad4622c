# league_api/innings_state.py
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from league_api.ball_events import Delivery, classify_event
from league_api.config import MAX_WICKETS
from league_api.errors import InvalidStateError
from league_api.models import BallEvent, Innings, InningsState
from league_api.overs_math import BALLS_PER_OVER, split_legal_balls


@dataclass(frozen=True)
class InningsTally:
    """
    Running totals of one innings, produced only by folding BallEvents.

    overs / balls are derived from `legal_balls`, never stored on their own.
    """
    runs: int = 0
    wickets: int = 0
    legal_balls: int = 0
    extras: int = 0
    deliveries: int = 0

    striker_id: Optional[str] = None
    non_striker_id: Optional[str] = None
    bowler_id: Optional[str] = None

    @property
    def overs(self) -> int:
        return split_legal_balls(self.legal_balls)[0]

    @property
    def balls(self) -> int:
        return split_legal_balls(self.legal_balls)[1]

    @property
    def current_over_number(self) -> int:
        """1-based number of the over the next legal ball belongs to."""
        return self.legal_balls // BALLS_PER_OVER + 1


def _resolve_pair(tally: InningsTally, ball: BallEvent) -> Tuple[str, Optional[str]]:
    """
    Returns (facing batsman, partner) for this delivery.

    The event always names who faced. The partner is the event's
    non-striker when given, otherwise whichever batsman is left in the
    current pair (after a wicket that is the de-facto striker).
    """
    batsman = ball.batsman_id
    if ball.non_striker_id:
        return batsman, ball.non_striker_id

    if batsman == tally.striker_id:
        return batsman, tally.non_striker_id
    if batsman == tally.non_striker_id:
        return batsman, tally.striker_id

    # New batsman filling the vacant slot
    return batsman, tally.striker_id if tally.striker_id is not None else tally.non_striker_id


def apply_ball(tally: InningsTally, ball: BallEvent, delivery: Optional[Delivery] = None) -> InningsTally:
    """
    Pure per-ball transition.

    - legal deliveries advance the legal-ball count (over = count // 6)
    - runs / extras / wickets accumulate regardless of legality
    - wicket: the partner becomes the de-facto striker, the other slot is vacant
    - otherwise strike swaps when the completed runs are odd
    """
    d = delivery if delivery is not None else classify_event(ball)

    if d.is_wicket and tally.wickets >= MAX_WICKETS:
        raise InvalidStateError(f"Innings already has {MAX_WICKETS} wickets")

    batsman, partner = _resolve_pair(tally, ball)

    if d.is_wicket:
        striker, non_striker = partner, None
    elif d.rotates_strike:
        striker, non_striker = partner, batsman
    else:
        striker, non_striker = batsman, partner

    return dataclasses.replace(
        tally,
        runs=tally.runs + d.total_runs,
        wickets=tally.wickets + d.wicket,
        legal_balls=tally.legal_balls + (1 if d.legal else 0),
        extras=tally.extras + d.extras,
        deliveries=tally.deliveries + 1,
        striker_id=striker,
        non_striker_id=non_striker,
        bowler_id=ball.bowler_id,
    )


def replay(events: Iterable[BallEvent]) -> InningsTally:
    """Fold the ordered ledger of one innings into its totals."""
    tally = InningsTally()
    for ball in events:
        tally = apply_ball(tally, ball)
    return tally


def is_complete(tally: InningsTally, overs_limit: int, max_wickets: int = MAX_WICKETS) -> bool:
    return tally.wickets >= max_wickets or tally.legal_balls >= overs_limit * BALLS_PER_OVER


def innings_state(tally: Optional[InningsTally], overs_limit: int) -> InningsState:
    if tally is None or tally.deliveries == 0:
        return "NOT_STARTED"
    if is_complete(tally, overs_limit):
        return "COMPLETE"
    return "IN_PROGRESS"


def write_tally(innings: Innings, tally: InningsTally) -> None:
    """Overwrite the cached counters of an Innings record with a fold result."""
    innings.runs = tally.runs
    innings.wickets = tally.wickets
    innings.overs = tally.overs
    innings.balls = tally.balls
    innings.extras = tally.extras
    innings.striker_id = tally.striker_id
    innings.non_striker_id = tally.non_striker_id
    innings.bowler_id = tally.bowler_id
