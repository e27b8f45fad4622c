# league_api/fixtures.py
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from league_api.errors import ValidationError
from league_api.models import TOURNAMENT_FORMATS, Team, TournamentFormat

# A shuffle strategy returns a re-ordered copy and never mutates its input
ShuffleStrategy = Callable[[Sequence[Team]], List[Team]]


# -----------------------------
# Models
# -----------------------------
@dataclass(frozen=True)
class FixtureStub:
    """A match to be created in SCHEDULED status (no fee, no prize)."""
    home_team_id: str
    away_team_id: str
    title: str
    round: int
    match_number: int


# -----------------------------
# Shuffle strategies
# -----------------------------
def random_shuffle(rng: Optional[random.Random] = None, seed: Optional[int] = None) -> ShuffleStrategy:
    """
    Seeded shuffle. Pass `rng` to share a generator, or `seed` for a
    reproducible one; with neither, a fresh unseeded Random is used.
    """
    gen = rng if rng is not None else random.Random(seed)

    def _shuffle(teams: Sequence[Team]) -> List[Team]:
        out = list(teams)
        gen.shuffle(out)
        return out

    return _shuffle


def keep_order(teams: Sequence[Team]) -> List[Team]:
    return list(teams)


# -----------------------------
# Generators
# -----------------------------
def knockout_fixtures(teams: Sequence[Team], shuffle: ShuffleStrategy) -> List[FixtureStub]:
    """
    Pair consecutive teams of the shuffled list (0 v 1, 2 v 3, ...).
    An odd team out sits out round 1; floor(n/2) matches.
    """
    drawn = shuffle(teams)
    out: List[FixtureStub] = []
    for i in range(0, len(drawn) - 1, 2):
        home, away = drawn[i], drawn[i + 1]
        out.append(FixtureStub(
            home_team_id=home.id,
            away_team_id=away.id,
            title=f"Round 1 - {home.name} vs {away.name}",
            round=1,
            match_number=i // 2 + 1,
        ))
    return out


def _league_round(n_teams: int, match_number: int) -> int:
    return match_number // (n_teams - 1) + 1


def league_fixtures(teams: Sequence[Team], *, reverse: bool = False, start_number: int = 1) -> List[FixtureStub]:
    """
    Single round-robin in registration order: every pair i < j once,
    team i at home (team j when `reverse`). n*(n-1)/2 matches.
    """
    n = len(teams)
    out: List[FixtureStub] = []
    match_number = start_number
    for i in range(n):
        for j in range(i + 1, n):
            home, away = (teams[j], teams[i]) if reverse else (teams[i], teams[j])
            title = f"{home.name} vs {away.name}"
            if reverse:
                title += " (Second leg)"
            out.append(FixtureStub(
                home_team_id=home.id,
                away_team_id=away.id,
                title=title,
                round=_league_round(n, match_number),
                match_number=match_number,
            ))
            match_number += 1
    return out


def double_league_fixtures(teams: Sequence[Team]) -> List[FixtureStub]:
    """Two round-robins, home/away swapped in the second; n*(n-1) matches."""
    first_leg = league_fixtures(teams)
    second_leg = league_fixtures(teams, reverse=True, start_number=len(first_leg) + 1)
    return first_leg + second_leg


def generate_fixtures(
    teams: Sequence[Team],
    fmt: TournamentFormat,
    *,
    shuffle: Optional[ShuffleStrategy] = None,
) -> List[FixtureStub]:
    """
    Pure: builds the complete fixture list or raises before anything is
    created. `shuffle` only matters for KNOCKOUT.
    """
    if fmt not in TOURNAMENT_FORMATS:
        raise ValidationError(f"Invalid tournament format: {fmt}")

    if len(teams) < 2:
        raise ValidationError(f"At least 2 teams are required to generate fixtures (got {len(teams)})")

    ids = [t.id for t in teams]
    if len(set(ids)) != len(ids):
        raise ValidationError("Duplicate team in fixture roster")

    if fmt == "KNOCKOUT":
        return knockout_fixtures(teams, shuffle or random_shuffle())
    if fmt == "LEAGUE":
        return league_fixtures(teams)
    return double_league_fixtures(teams)
