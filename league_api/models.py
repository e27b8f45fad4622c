# league_api/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Tuple


# -----------------------------
# Status / format semantics
# -----------------------------
MatchStatus = Literal["SCHEDULED", "ACCEPTED", "LIVE", "COMPLETED", "CANCELLED", "ABANDONED", "DISPUTED"]
InningsNumber = Literal["1", "2"]
InningsState = Literal["NOT_STARTED", "IN_PROGRESS", "COMPLETE"]
TournamentFormat = Literal["KNOCKOUT", "LEAGUE", "DOUBLE_LEAGUE"]
TournamentStatus = Literal["UPCOMING", "REGISTRATION", "ONGOING", "COMPLETED", "CANCELLED"]

MATCH_STATUSES = ("SCHEDULED", "ACCEPTED", "LIVE", "COMPLETED", "CANCELLED", "ABANDONED", "DISPUTED")
INNINGS_NUMBERS = ("1", "2")
TOURNAMENT_FORMATS = ("KNOCKOUT", "LEAGUE", "DOUBLE_LEAGUE")


def utc_now() -> datetime:
    return datetime.utcnow()


# -----------------------------
# Surrounding records (seeded through the narrow CRUD surface)
# -----------------------------
@dataclass
class Team:
    id: str
    name: str
    short_name: str


@dataclass
class Player:
    id: str
    team_id: str
    name: str
    jersey_number: int
    role: str = "BATSMAN"


# -----------------------------
# Match aggregate
# -----------------------------
@dataclass
class Match:
    id: str
    home_team_id: str
    away_team_id: str
    overs_per_innings: int
    status: MatchStatus = "SCHEDULED"
    title: str = ""

    tournament_id: Optional[str] = None
    round: Optional[int] = None
    match_number: Optional[int] = None

    # Tournament matches carry no money
    entry_fee: int = 0
    prize_pool: int = 0

    winner_id: Optional[str] = None
    result: Optional[str] = None
    result_summary: Optional[str] = None

    # Compiled scorecard; always rebuilt wholesale, never patched
    scorecard: Optional[Dict[str, Any]] = None

    created_by: str = "system"
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class Innings:
    """
    One team's batting turn. Counters below are a cache of the fold over
    the innings' BallEvents (see innings_state.replay) and are replaced
    wholesale after every applied ball.
    """
    id: str
    match_id: str
    inning: InningsNumber
    batting_team_id: str
    bowling_team_id: str
    state: InningsState = "IN_PROGRESS"

    runs: int = 0
    wickets: int = 0
    overs: int = 0
    balls: int = 0
    extras: int = 0

    striker_id: Optional[str] = None
    non_striker_id: Optional[str] = None
    bowler_id: Optional[str] = None


@dataclass(frozen=True)
class BallEvent:
    """Append-only ledger entry for one delivery."""
    id: str
    match_id: str
    innings_id: str
    inning: InningsNumber
    sequence: int

    over: int
    ball: int
    batsman_id: str
    bowler_id: str
    event: str
    runs: int
    wickets: int

    non_striker_id: Optional[str] = None
    commentary: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class PlayerStat:
    player_id: str

    matches: int = 0

    # Batting
    batting_innings: int = 0
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    dismissals: int = 0
    highest_score: int = 0
    half_centuries: int = 0
    centuries: int = 0

    # Bowling (kept apart from batting runs)
    balls_bowled: int = 0
    runs_conceded: int = 0
    wickets: int = 0
    # match id -> (wickets, runs conceded) in that match
    bowling_by_match: Dict[str, Tuple[int, int]] = field(default_factory=dict)

    @property
    def batting_average(self) -> float:
        if self.dismissals == 0:
            return float(self.runs)
        return self.runs / self.dismissals

    @property
    def strike_rate(self) -> float:
        if self.balls_faced == 0:
            return 0.0
        return self.runs / self.balls_faced * 100

    @property
    def economy(self) -> float:
        if self.balls_bowled == 0:
            return 0.0
        return self.runs_conceded / (self.balls_bowled / 6.0)

    @property
    def bowling_average(self) -> Optional[float]:
        if self.wickets == 0:
            return None
        return self.runs_conceded / self.wickets

    @property
    def best_bowling_figures(self) -> Optional[Tuple[int, int]]:
        """Most wickets in a match, fewest runs breaking ties; None without a wicket."""
        taken = [f for f in self.bowling_by_match.values() if f[0] > 0]
        if not taken:
            return None
        return max(taken, key=lambda f: (f[0], -f[1]))

    @property
    def best_bowling(self) -> str:
        best = self.best_bowling_figures
        if best is None:
            return "-"
        return f"{best[0]}/{best[1]}"


# -----------------------------
# Tournament aggregate
# -----------------------------
@dataclass
class Tournament:
    id: str
    name: str
    format: TournamentFormat
    min_teams: int
    max_teams: int
    overs_per_match: int
    status: TournamentStatus = "UPCOMING"
    entry_fee: int = 0
    created_by: str = "system"
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class TournamentTeam:
    id: str
    tournament_id: str
    team_id: str
    status: str = "REGISTERED"
    payment_id: Optional[str] = None
    registered_at: datetime = field(default_factory=utc_now)
