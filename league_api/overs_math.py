# league_api/overs_math.py
from __future__ import annotations

from typing import Optional, Tuple

BALLS_PER_OVER = 6


def split_legal_balls(legal_balls: int) -> Tuple[int, int]:
    """
    Derive (completed overs, balls in current over) from a legal-ball count.
    The over/ball pointer is never stored independently of this count.
    """
    if legal_balls < 0:
        raise ValueError("Legal balls cannot be negative")
    return legal_balls // BALLS_PER_OVER, legal_balls % BALLS_PER_OVER


def balls_to_overs_str(legal_balls: int) -> str:
    overs, balls = split_legal_balls(legal_balls)
    return f"{overs}.{balls}"


def run_rate(runs: int, legal_balls: int) -> float:
    """runs / (legal_balls / 6); 0.0 before the first legal ball."""
    if legal_balls <= 0:
        return 0.0
    return runs / (legal_balls / float(BALLS_PER_OVER))


def projected_score(runs: int, legal_balls: int, overs_limit: int) -> int:
    """Score at the end of `overs_limit` overs if the current run rate holds."""
    if legal_balls <= 0:
        return runs
    return int(round(run_rate(runs, legal_balls) * overs_limit))


def required_run_rate(runs_needed: int, balls_remaining: int) -> Optional[float]:
    """None once no balls remain (target can no longer be reached)."""
    if runs_needed <= 0:
        return 0.0
    if balls_remaining <= 0:
        return None
    return runs_needed / (balls_remaining / float(BALLS_PER_OVER))
