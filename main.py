# main.py
from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Literal, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from league_api.config import DEFAULT_MAX_TEAMS, DEFAULT_MIN_TEAMS, LOG_LEVEL, OVERS_PER_INNINGS, validate_config
from league_api.errors import LeagueError
from league_api.player_stats import batting_rankings, bowling_rankings, stat_to_dict
from league_api.records_client import sync_team
from league_api.scoring import get_innings_state, get_match_scoring, record_ball_event, update_match_status
from league_api.store import LeagueStore
from league_api.tournaments import (
    create_tournament,
    get_standings,
    register_team,
    start_tournament,
    tournament_to_dict,
)

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# -----------------------
# App
# -----------------------
app = FastAPI(
    title="Local League Scoring API",
    version="0.1.0",
    description="Ball-by-ball match scoring, tournament fixtures and standings for a local cricket league",
)

store = LeagueStore()


@app.on_event("startup")
def on_startup():
    validate_config()


@app.get("/health")
def health_check():
    return {"status": "ok", "time": datetime.utcnow().isoformat() + "Z"}


# -----------------------
# Helpers
# -----------------------
def _http_error(e: LeagueError) -> HTTPException:
    if e.status_code >= 500:
        logger.error("%s: %s", e.kind, e.message)
    return HTTPException(status_code=e.status_code, detail=e.to_dict())


# -----------------------
# Teams / players (record seeding)
# -----------------------
class TeamIn(BaseModel):
    name: str = Field(..., min_length=2)
    short_name: Optional[str] = Field(None, max_length=5)


class PlayerIn(BaseModel):
    name: str = Field(..., min_length=1)
    jersey_number: int
    role: Literal["BATSMAN", "BOWLER", "ALL_ROUNDER", "WICKET_KEEPER"] = "BATSMAN"


@app.post("/api/teams", status_code=201)
def api_create_team(req: TeamIn):
    try:
        return asdict(store.add_team(req.name, req.short_name))
    except LeagueError as e:
        raise _http_error(e)


@app.get("/api/teams")
def api_list_teams():
    return {"teams": [asdict(t) for t in store.teams.values()]}


@app.post("/api/teams/{team_id}/players", status_code=201)
def api_add_player(team_id: str, req: PlayerIn):
    try:
        return asdict(store.add_player(team_id, req.name, req.jersey_number, role=req.role))
    except LeagueError as e:
        raise _http_error(e)


@app.post("/api/teams/{team_id}/sync")
def api_sync_team(team_id: str):
    try:
        added = sync_team(store, team_id)
    except LeagueError as e:
        raise _http_error(e)
    return {"team_id": team_id, "added": [asdict(p) for p in added]}


# -----------------------
# Matches
# -----------------------
class MatchIn(BaseModel):
    home_team_id: str
    away_team_id: str
    title: Optional[str] = None
    overs_per_innings: int = Field(OVERS_PER_INNINGS)
    entry_fee: int = Field(0, ge=0)
    created_by: str = Field("system", min_length=1)


MatchStatusIn = Literal["SCHEDULED", "ACCEPTED", "LIVE", "COMPLETED", "CANCELLED", "ABANDONED", "DISPUTED"]


class MatchStatusRequest(BaseModel):
    status: MatchStatusIn
    winner_id: Optional[str] = None


@app.post("/api/matches", status_code=201)
def api_create_match(req: MatchIn):
    try:
        match = store.add_match(
            req.home_team_id,
            req.away_team_id,
            overs_per_innings=req.overs_per_innings,
            title=req.title,
            entry_fee=req.entry_fee,
            created_by=req.created_by,
        )
    except LeagueError as e:
        raise _http_error(e)
    return asdict(match)


@app.get("/api/matches/{match_id}")
def api_get_match(match_id: str):
    try:
        return asdict(store.get_match(match_id))
    except LeagueError as e:
        raise _http_error(e)


@app.post("/api/matches/{match_id}/status")
def api_match_status(match_id: str, req: MatchStatusRequest):
    try:
        match = update_match_status(store, match_id, req.status, winner_id=req.winner_id)
    except LeagueError as e:
        raise _http_error(e)
    return asdict(match)


# -----------------------
# Scoring
# -----------------------
class BallEventRequest(BaseModel):
    match_id: str = Field(..., min_length=1)
    inning: str = Field(..., description="'1' or '2'")
    over: int = Field(..., description="1-based over number")
    ball: int = Field(..., description="1-based ball label within the over")
    batsman_id: str = Field(..., min_length=1)
    bowler_id: str = Field(..., min_length=1)
    non_striker_id: Optional[str] = None
    event: str = Field(..., description="0-6, W, WD, NB, LB, BY or CB")
    runs: Optional[int] = Field(None, description="Defaults from the event code")
    wickets: Optional[int] = Field(None, description="0 or 1; defaults from the event code")
    commentary: Optional[str] = None


@app.post("/api/scoring/ball", status_code=201)
def api_record_ball(req: BallEventRequest):
    try:
        ball = record_ball_event(
            store,
            req.match_id,
            inning=req.inning,
            over=req.over,
            ball=req.ball,
            batsman_id=req.batsman_id,
            bowler_id=req.bowler_id,
            non_striker_id=req.non_striker_id,
            event=req.event,
            runs=req.runs,
            wickets=req.wickets,
            commentary=req.commentary,
        )
        innings = get_innings_state(store, req.match_id, req.inning)
        match = store.get_match(req.match_id)
    except LeagueError as e:
        if e.status_code < 500:
            logger.warning("Rejected ball for match %s: %s %s", req.match_id, e.kind, e.message)
        raise _http_error(e)

    return {
        "ball_event": asdict(ball),
        "innings": asdict(innings),
        "match_status": match.status,
        "scorecard": match.scorecard,
        "message": "Ball event recorded successfully",
    }


@app.get("/api/scoring/match/{match_id}")
def api_match_scoring(match_id: str):
    try:
        return get_match_scoring(store, match_id)
    except LeagueError as e:
        raise _http_error(e)


@app.get("/api/scoring/match/{match_id}/innings/{inning}")
def api_innings_state(match_id: str, inning: str):
    try:
        return asdict(get_innings_state(store, match_id, inning))
    except LeagueError as e:
        raise _http_error(e)


# -----------------------
# Player statistics
# -----------------------
@app.get("/api/players/{player_id}/stats")
def api_player_stats(player_id: str):
    try:
        store.get_player(player_id)
    except LeagueError as e:
        raise _http_error(e)

    row = store.player_stats.get(player_id)
    if row is None:
        return {"player_id": player_id, "stats": None}
    return {"player_id": player_id, "stats": stat_to_dict(row)}


@app.get("/api/rankings/players")
def api_player_rankings(type: Literal["batting", "bowling"] = "batting", limit: int = 20):
    if limit <= 0:
        raise HTTPException(status_code=400, detail="limit must be positive")
    rows = list(store.player_stats.values())
    if type == "bowling":
        return {"type": type, "rankings": bowling_rankings(rows, limit)}
    return {"type": type, "rankings": batting_rankings(rows, limit)}


# -----------------------
# Tournaments
# -----------------------
class TournamentIn(BaseModel):
    name: str = Field(..., min_length=2)
    format: Literal["KNOCKOUT", "LEAGUE", "DOUBLE_LEAGUE"]
    max_teams: int = Field(DEFAULT_MAX_TEAMS)
    min_teams: int = Field(DEFAULT_MIN_TEAMS)
    overs_per_match: int = Field(OVERS_PER_INNINGS)
    entry_fee: Optional[int] = None
    created_by: str = Field("system", min_length=1)


class JoinTournamentRequest(BaseModel):
    team_id: str = Field(..., min_length=1)
    payment_id: Optional[str] = None


@app.post("/api/tournaments", status_code=201)
def api_create_tournament(req: TournamentIn):
    try:
        t = create_tournament(
            store,
            name=req.name,
            format=req.format,
            max_teams=req.max_teams,
            min_teams=req.min_teams,
            overs_per_match=req.overs_per_match,
            entry_fee=req.entry_fee,
            created_by=req.created_by,
        )
    except LeagueError as e:
        raise _http_error(e)
    return tournament_to_dict(store, t)


@app.get("/api/tournaments/{tournament_id}")
def api_get_tournament(tournament_id: str):
    try:
        t = store.get_tournament(tournament_id)
        standings = get_standings(store, tournament_id)
    except LeagueError as e:
        raise _http_error(e)

    out = tournament_to_dict(store, t)
    out["matches"] = [asdict(m) for m in store.tournament_matches(tournament_id)]
    out["standings"] = standings
    return out


@app.post("/api/tournaments/{tournament_id}/join", status_code=201)
def api_join_tournament(tournament_id: str, req: JoinTournamentRequest):
    try:
        reg, matches = register_team(store, tournament_id, req.team_id, payment_id=req.payment_id)
        t = store.get_tournament(tournament_id)
    except LeagueError as e:
        raise _http_error(e)

    return {
        "message": "Successfully joined tournament",
        "tournament_team": asdict(reg),
        "tournament_status": t.status,
        "fixtures": [asdict(m) for m in matches],
    }


@app.post("/api/tournaments/{tournament_id}/start")
def api_start_tournament(tournament_id: str):
    try:
        matches = start_tournament(store, tournament_id)
    except LeagueError as e:
        raise _http_error(e)
    return {
        "message": "Tournament started successfully",
        "fixtures_count": len(matches),
        "fixtures": [asdict(m) for m in matches],
    }


@app.get("/api/tournaments/{tournament_id}/standings")
def api_standings(tournament_id: str):
    try:
        return {"tournament_id": tournament_id, "standings": get_standings(store, tournament_id)}
    except LeagueError as e:
        raise _http_error(e)
