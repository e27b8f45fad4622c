# league_api/store.py
from __future__ import annotations

import logging
import threading
import uuid
from typing import Dict, List, Optional

from league_api.config import MAX_OVERS_PER_INNINGS, MIN_OVERS_PER_INNINGS, OVERS_PER_INNINGS
from league_api.errors import ConflictError, NotFoundError, ValidationError
from league_api.models import (
    BallEvent,
    Innings,
    Match,
    Player,
    PlayerStat,
    Team,
    Tournament,
    TournamentTeam,
)

logger = logging.getLogger(__name__)

MAX_JERSEY_NUMBER = 99


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class LeagueStore:
    """
    In-memory registry of league records (sufficient for single-instance deploys).

    Innings live in their own arena keyed match id -> innings number, and
    ball ledgers are keyed by innings id; the Match record never embeds them.
    Writers take `match_lock(match_id)` / `tournament_lock(tournament_id)`;
    `stats_lock` guards the shared PlayerStat rows.
    """

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self.stats_lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        self.teams: Dict[str, Team] = {}
        self.players: Dict[str, Player] = {}
        self.matches: Dict[str, Match] = {}
        self.innings: Dict[str, Dict[str, Innings]] = {}
        self.ball_events: Dict[str, List[BallEvent]] = {}
        self.player_stats: Dict[str, PlayerStat] = {}
        self.tournaments: Dict[str, Tournament] = {}
        self.tournament_teams: Dict[str, List[TournamentTeam]] = {}
        self._match_locks: Dict[str, threading.Lock] = {}
        self._tournament_locks: Dict[str, threading.Lock] = {}

    # -------------------------
    # Locks
    # -------------------------
    def match_lock(self, match_id: str) -> threading.Lock:
        """Raises NotFoundError for an unknown match; no lock is created for it."""
        with self._registry_lock:
            if match_id not in self.matches:
                raise NotFoundError(f"Match not found: {match_id}")
            return self._match_locks.setdefault(match_id, threading.Lock())

    def tournament_lock(self, tournament_id: str) -> threading.Lock:
        with self._registry_lock:
            if tournament_id not in self.tournaments:
                raise NotFoundError(f"Tournament not found: {tournament_id}")
            return self._tournament_locks.setdefault(tournament_id, threading.Lock())

    # -------------------------
    # Teams / players
    # -------------------------
    def add_team(self, name: str, short_name: Optional[str] = None, team_id: Optional[str] = None) -> Team:
        name = (name or "").strip()
        if len(name) < 2:
            raise ValidationError("Team name must be at least 2 characters")

        lowered = name.lower()
        if any(t.name.lower() == lowered for t in self.teams.values()):
            raise ConflictError(f"Team name already taken: {name}")

        tid = team_id or new_id("team")
        if tid in self.teams:
            raise ConflictError(f"Team already exists: {tid}")

        team = Team(id=tid, name=name, short_name=(short_name or name[:3]).strip().upper())
        self.teams[tid] = team
        return team

    def get_team(self, team_id: str) -> Team:
        team = self.teams.get(team_id)
        if team is None:
            raise NotFoundError(f"Team not found: {team_id}")
        return team

    def add_player(
        self,
        team_id: str,
        name: str,
        jersey_number: int,
        role: str = "BATSMAN",
        player_id: Optional[str] = None,
    ) -> Player:
        self.get_team(team_id)

        name = (name or "").strip()
        if not name:
            raise ValidationError("Player name is required")

        if jersey_number < 0 or jersey_number > MAX_JERSEY_NUMBER:
            raise ValidationError(f"Jersey number must be between 0 and {MAX_JERSEY_NUMBER} (got {jersey_number})")

        for p in self.team_players(team_id):
            if p.jersey_number == jersey_number:
                raise ConflictError(f"Jersey number {jersey_number} already used in team {team_id}")

        pid = player_id or new_id("player")
        if pid in self.players:
            raise ConflictError(f"Player already exists: {pid}")

        player = Player(id=pid, team_id=team_id, name=name, jersey_number=jersey_number, role=role)
        self.players[pid] = player
        return player

    def get_player(self, player_id: str) -> Player:
        player = self.players.get(player_id)
        if player is None:
            raise NotFoundError(f"Player not found: {player_id}")
        return player

    def team_players(self, team_id: str) -> List[Player]:
        return [p for p in self.players.values() if p.team_id == team_id]

    # -------------------------
    # Matches / innings / ledger
    # -------------------------
    def build_match(
        self,
        home_team_id: str,
        away_team_id: str,
        *,
        overs_per_innings: int = OVERS_PER_INNINGS,
        title: Optional[str] = None,
        status: str = "SCHEDULED",
        tournament_id: Optional[str] = None,
        round: Optional[int] = None,
        match_number: Optional[int] = None,
        entry_fee: int = 0,
        created_by: str = "system",
    ) -> Match:
        home = self.get_team(home_team_id)
        away = self.get_team(away_team_id)
        if home.id == away.id:
            raise ValidationError("Home and away teams must be different")

        if overs_per_innings < MIN_OVERS_PER_INNINGS or overs_per_innings > MAX_OVERS_PER_INNINGS:
            raise ValidationError(
                f"overs_per_innings must be between {MIN_OVERS_PER_INNINGS} and {MAX_OVERS_PER_INNINGS}"
            )

        if entry_fee < 0:
            raise ValidationError("entry_fee cannot be negative")

        match = Match(
            id=new_id("match"),
            home_team_id=home.id,
            away_team_id=away.id,
            overs_per_innings=overs_per_innings,
            status=status,
            title=title or f"{home.name} vs {away.name}",
            tournament_id=tournament_id,
            round=round,
            match_number=match_number,
            entry_fee=entry_fee,
            created_by=created_by,
        )
        return match

    def add_match(self, home_team_id: str, away_team_id: str, **kwargs) -> Match:
        match = self.build_match(home_team_id, away_team_id, **kwargs)
        self.insert_matches([match])
        return match

    def insert_matches(self, matches: List[Match]) -> None:
        for m in matches:
            self.matches[m.id] = m
            logger.debug("Created match %s (%s)", m.id, m.title)

    def get_match(self, match_id: str) -> Match:
        match = self.matches.get(match_id)
        if match is None:
            raise NotFoundError(f"Match not found: {match_id}")
        return match

    def match_innings(self, match_id: str) -> Dict[str, Innings]:
        """inning number -> Innings (sparse: innings 2 may not exist yet)."""
        return self.innings.get(match_id, {})

    def get_innings(self, match_id: str, inning: str) -> Innings:
        inn = self.match_innings(match_id).get(inning)
        if inn is None:
            raise NotFoundError(f"Innings {inning} not found for match {match_id}")
        return inn

    def put_innings(self, innings: Innings) -> None:
        self.innings.setdefault(innings.match_id, {})[innings.inning] = innings
        self.ball_events.setdefault(innings.id, [])

    def innings_events(self, innings_id: str) -> List[BallEvent]:
        return list(self.ball_events.get(innings_id, []))

    def match_events(self, match_id: str) -> List[BallEvent]:
        out: List[BallEvent] = []
        for number in sorted(self.match_innings(match_id)):
            out.extend(self.innings_events(self.innings[match_id][number].id))
        return out

    def append_event(self, ball: BallEvent) -> None:
        self.ball_events.setdefault(ball.innings_id, []).append(ball)

    # -------------------------
    # Tournaments
    # -------------------------
    def add_tournament(self, tournament: Tournament) -> Tournament:
        if tournament.id in self.tournaments:
            raise ConflictError(f"Tournament already exists: {tournament.id}")
        self.tournaments[tournament.id] = tournament
        self.tournament_teams[tournament.id] = []
        return tournament

    def get_tournament(self, tournament_id: str) -> Tournament:
        t = self.tournaments.get(tournament_id)
        if t is None:
            raise NotFoundError(f"Tournament not found: {tournament_id}")
        return t

    def registrations(self, tournament_id: str) -> List[TournamentTeam]:
        return list(self.tournament_teams.get(tournament_id, []))

    def tournament_matches(self, tournament_id: str) -> List[Match]:
        out = [m for m in self.matches.values() if m.tournament_id == tournament_id]
        return sorted(out, key=lambda m: (m.match_number or 0))
