# league_api/tournaments.py
from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Dict, List, Optional, Tuple

from league_api.config import (
    DEFAULT_MIN_TEAMS,
    KNOCKOUT_SEED,
    MAX_OVERS_PER_INNINGS,
    MIN_OVERS_PER_INNINGS,
    OVERS_PER_INNINGS,
    TEAM_LIMIT_CEILING,
)
from league_api.errors import ConflictError, InvalidStateError, LeagueError, ValidationError
from league_api.fixtures import ShuffleStrategy, generate_fixtures, random_shuffle
from league_api.innings_state import replay
from league_api.models import TOURNAMENT_FORMATS, Match, Tournament, TournamentTeam
from league_api.points_table import build_rows, compute_sorted_table
from league_api.store import LeagueStore, new_id

logger = logging.getLogger(__name__)

MIN_TEAMS_FLOOR = 2
OPEN_STATUSES = ("UPCOMING", "REGISTRATION")


def create_tournament(
    store: LeagueStore,
    *,
    name: str,
    format: str,
    max_teams: int,
    min_teams: int = DEFAULT_MIN_TEAMS,
    overs_per_match: int = OVERS_PER_INNINGS,
    entry_fee: Optional[int] = None,
    created_by: str = "system",
) -> Tournament:
    name = (name or "").strip()
    if len(name) < 2:
        raise ValidationError("Tournament name must be at least 2 characters")

    if format not in TOURNAMENT_FORMATS:
        raise ValidationError(f"Invalid tournament format: {format}", details={"allowed": list(TOURNAMENT_FORMATS)})

    if min_teams < MIN_TEAMS_FLOOR:
        raise ValidationError(f"min_teams must be at least {MIN_TEAMS_FLOOR}")
    if max_teams > TEAM_LIMIT_CEILING:
        raise ValidationError(f"max_teams cannot exceed {TEAM_LIMIT_CEILING}")
    if min_teams > max_teams:
        raise ValidationError("min_teams cannot exceed max_teams")

    if overs_per_match < MIN_OVERS_PER_INNINGS or overs_per_match > MAX_OVERS_PER_INNINGS:
        raise ValidationError(
            f"overs_per_match must be between {MIN_OVERS_PER_INNINGS} and {MAX_OVERS_PER_INNINGS}"
        )

    if entry_fee is not None and entry_fee <= 0:
        raise ValidationError("entry_fee must be positive")

    tournament = Tournament(
        id=new_id("tournament"),
        name=name,
        format=format,
        min_teams=min_teams,
        max_teams=max_teams,
        overs_per_match=overs_per_match,
        entry_fee=entry_fee or 0,
        created_by=created_by,
    )
    return store.add_tournament(tournament)


def default_shuffle() -> ShuffleStrategy:
    return random_shuffle(seed=KNOCKOUT_SEED)


# -----------------------
# Registration
# -----------------------
def register_team(
    store: LeagueStore,
    tournament_id: str,
    team_id: str,
    *,
    payment_id: Optional[str] = None,
    shuffle: Optional[ShuffleStrategy] = None,
) -> Tuple[TournamentTeam, List[Match]]:
    """
    Registers a team. Returns (registration, fixtures) where fixtures is
    non-empty only when this registration filled the tournament and
    started it.
    """
    with store.tournament_lock(tournament_id):
        tournament = store.get_tournament(tournament_id)
        if tournament.status not in OPEN_STATUSES:
            raise InvalidStateError(
                f"Tournament is not accepting registrations (status={tournament.status})"
            )

        team = store.get_team(team_id)
        regs = store.registrations(tournament_id)

        if any(r.team_id == team.id for r in regs):
            raise ConflictError(f"Team {team.id} is already registered for this tournament")

        if len(regs) >= tournament.max_teams:
            raise InvalidStateError("Tournament has reached maximum team limit")

        reg = TournamentTeam(
            id=new_id("entry"),
            tournament_id=tournament_id,
            team_id=team.id,
            payment_id=payment_id,
        )
        previous_status = tournament.status
        store.tournament_teams[tournament_id].append(reg)
        count = len(regs) + 1

        if count >= tournament.min_teams and tournament.status == "UPCOMING":
            tournament.status = "REGISTRATION"

        matches: List[Match] = []
        if count >= tournament.max_teams:
            try:
                matches = _start_locked(store, tournament, shuffle)
            except LeagueError:
                store.tournament_teams[tournament_id].remove(reg)
                tournament.status = previous_status
                raise

        logger.info("Tournament %s: registered %s (%s/%s)", tournament_id, team.id, count, tournament.max_teams)
        return reg, matches


# -----------------------
# StartTournament
# -----------------------
def start_tournament(
    store: LeagueStore,
    tournament_id: str,
    *,
    shuffle: Optional[ShuffleStrategy] = None,
) -> List[Match]:
    with store.tournament_lock(tournament_id):
        tournament = store.get_tournament(tournament_id)
        return _start_locked(store, tournament, shuffle)


def _start_locked(store: LeagueStore, tournament: Tournament, shuffle: Optional[ShuffleStrategy]) -> List[Match]:
    """
    Caller holds the tournament lock. Builds every match before inserting
    any, so a failure leaves the tournament untouched.
    """
    if tournament.status not in OPEN_STATUSES:
        raise InvalidStateError(f"Tournament already started (status={tournament.status})")

    regs = store.registrations(tournament.id)
    if len(regs) < tournament.min_teams:
        raise InvalidStateError(
            f"Tournament needs at least {tournament.min_teams} teams (registered={len(regs)})",
            details={"registered": len(regs), "min_teams": tournament.min_teams},
        )

    teams = [store.get_team(r.team_id) for r in regs]
    stubs = generate_fixtures(teams, tournament.format, shuffle=shuffle or default_shuffle())

    matches = [
        store.build_match(
            s.home_team_id,
            s.away_team_id,
            overs_per_innings=tournament.overs_per_match,
            title=s.title,
            status="SCHEDULED",
            tournament_id=tournament.id,
            round=s.round,
            match_number=s.match_number,
            entry_fee=0,
        )
        for s in stubs
    ]

    store.insert_matches(matches)
    tournament.status = "ONGOING"
    logger.info("Tournament %s started: %s %s fixtures", tournament.id, len(matches), tournament.format)
    return matches


# -----------------------
# GetStandings
# -----------------------
def _match_runs(store: LeagueStore, match: Match) -> Tuple[int, int]:
    """(home runs, away runs) folded from the ball ledger."""
    runs: Dict[str, int] = {match.home_team_id: 0, match.away_team_id: 0}
    for inn in store.match_innings(match.id).values():
        tally = replay(store.innings_events(inn.id))
        runs[inn.batting_team_id] = runs.get(inn.batting_team_id, 0) + tally.runs
    return runs[match.home_team_id], runs[match.away_team_id]


def get_standings(store: LeagueStore, tournament_id: str) -> List[dict]:
    """Ranked table for LEAGUE / DOUBLE_LEAGUE, empty for KNOCKOUT."""
    tournament = store.get_tournament(tournament_id)
    if tournament.format == "KNOCKOUT":
        return []

    team_ids = [r.team_id for r in store.registrations(tournament_id)]
    completed = [m for m in store.tournament_matches(tournament_id) if m.status == "COMPLETED"]

    runs_by_match = {m.id: _match_runs(store, m) for m in completed}

    names = {tid: store.teams[tid].name for tid in team_ids if tid in store.teams}
    return compute_sorted_table(build_rows(team_ids, completed, runs_by_match), names)


def tournament_to_dict(store: LeagueStore, tournament: Tournament) -> dict:
    out = asdict(tournament)
    out["teams"] = [asdict(r) for r in store.registrations(tournament.id)]
    out["match_count"] = len(store.tournament_matches(tournament.id))
    return out
