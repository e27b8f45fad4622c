# league_api/points_table.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from league_api.models import Match

POINTS_FOR_WIN = 2
POINTS_FOR_TIE = 1


@dataclass
class TeamRow:
    team: str
    played: int = 0
    won: int = 0
    lost: int = 0
    tied: int = 0
    points: int = 0
    runs_for: int = 0
    runs_against: int = 0

    @property
    def nrr(self) -> int:
        """
        Simplified net run rate: runs for minus runs against, not
        normalised by overs (the league's existing convention).
        """
        return self.runs_for - self.runs_against


def apply_result(row_a: TeamRow, row_b: TeamRow, *, winner: Optional[str] = None) -> None:
    """
    Updates played/won/lost/tied/points ONLY.

    Rules:
    - winner recorded: 2 points to the winner, a loss for every other side
    - no winner: tie, 1 point each
    """
    row_a.played += 1
    row_b.played += 1

    if winner is None:
        row_a.tied += 1
        row_b.tied += 1
        row_a.points += POINTS_FOR_TIE
        row_b.points += POINTS_FOR_TIE
        return

    if winner == row_a.team:
        row_a.won += 1
        row_a.points += POINTS_FOR_WIN
        row_b.lost += 1
    elif winner == row_b.team:
        row_b.won += 1
        row_b.points += POINTS_FOR_WIN
        row_a.lost += 1
    else:
        # winner recorded but neither side: a loss for both
        row_a.lost += 1
        row_b.lost += 1


def apply_runs(row_home: TeamRow, row_away: TeamRow, home_runs: int, away_runs: int) -> None:
    row_home.runs_for += int(home_runs)
    row_home.runs_against += int(away_runs)
    row_away.runs_for += int(away_runs)
    row_away.runs_against += int(home_runs)


def build_rows(
    team_ids: Sequence[str],
    completed: Iterable[Match],
    runs_by_match: Mapping[str, Tuple[int, int]],
) -> List[TeamRow]:
    """
    Recompute every row from scratch.

    team_ids      registered teams, in registration order
    completed     COMPLETED matches of the tournament
    runs_by_match match id -> (home runs, away runs); missing -> (0, 0)
    Matches against teams outside `team_ids` are ignored.
    """
    rows: Dict[str, TeamRow] = {tid: TeamRow(team=tid) for tid in team_ids}

    for m in completed:
        home = rows.get(m.home_team_id)
        away = rows.get(m.away_team_id)
        if home is None or away is None:
            continue
        apply_result(home, away, winner=m.winner_id)
        home_runs, away_runs = runs_by_match.get(m.id, (0, 0))
        apply_runs(home, away, home_runs, away_runs)

    return [rows[tid] for tid in team_ids]


def compute_sorted_table(rows: List[TeamRow], names: Optional[Mapping[str, str]] = None) -> List[dict]:
    """
    Returns standings sorted by:
    1) Points (desc)
    2) NRR (desc)
    Equal keys keep input order (sorted() is stable under reverse=True).
    """
    names = names or {}

    def key_fn(r: TeamRow):
        return (r.points, r.nrr)

    sorted_rows = sorted(rows, key=key_fn, reverse=True)

    out: List[dict] = []
    for idx, r in enumerate(sorted_rows, start=1):
        out.append({
            "pos": idx,
            "team": r.team,
            "team_name": names.get(r.team, r.team),
            "played": r.played,
            "won": r.won,
            "lost": r.lost,
            "tied": r.tied,
            "points": r.points,
            "runs_for": r.runs_for,
            "runs_against": r.runs_against,
            "nrr": r.nrr,
        })
    return out
