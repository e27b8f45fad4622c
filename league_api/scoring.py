# league_api/scoring.py
from __future__ import annotations

import copy
import dataclasses
import logging
from dataclasses import asdict
from typing import Dict, List, Optional

from league_api.ball_events import classify, validate_labels
from league_api.errors import InvalidStateError, NotFoundError, ValidationError
from league_api.innings_state import apply_ball, innings_state, replay, write_tally
from league_api.models import MATCH_STATUSES, BallEvent, Innings, Match, Player
from league_api.player_stats import apply_ball_to_stats, build_match_context
from league_api.scorecard import compile_scorecard, decide_result, result_text
from league_api.store import LeagueStore, new_id

logger = logging.getLogger(__name__)

# status -> statuses it may move to
ALLOWED_TRANSITIONS: Dict[str, frozenset] = {
    "SCHEDULED": frozenset({"ACCEPTED", "LIVE", "CANCELLED", "ABANDONED"}),
    "ACCEPTED": frozenset({"LIVE", "CANCELLED", "ABANDONED"}),
    "LIVE": frozenset({"COMPLETED", "CANCELLED", "ABANDONED", "DISPUTED"}),
    "COMPLETED": frozenset({"DISPUTED"}),
    "DISPUTED": frozenset({"COMPLETED"}),
    "CANCELLED": frozenset(),
    "ABANDONED": frozenset(),
}


# -----------------------
# Helpers
# -----------------------
def _sides(match: Match, inning: str):
    """(batting team, bowling team); home bats in innings 1."""
    if inning == "1":
        return match.home_team_id, match.away_team_id
    return match.away_team_id, match.home_team_id


def _check_side(player: Player, team_id: str, role: str) -> None:
    if player.team_id != team_id:
        raise ValidationError(
            f"{role} {player.id} does not belong to team {team_id}",
            details={"player_id": player.id, "team_id": team_id, "role": role},
        )


def _team_names(store: LeagueStore, match: Match) -> Dict[str, str]:
    names = {}
    for tid in (match.home_team_id, match.away_team_id):
        team = store.teams.get(tid)
        names[tid] = team.name if team else tid
    return names


# -----------------------
# RecordBallEvent
# -----------------------
def record_ball_event(
    store: LeagueStore,
    match_id: str,
    *,
    inning: str,
    over: int,
    ball: int,
    batsman_id: str,
    bowler_id: str,
    event: str,
    runs: Optional[int] = None,
    wickets: Optional[int] = None,
    non_striker_id: Optional[str] = None,
    commentary: Optional[str] = None,
) -> BallEvent:
    """
    Validate, append and apply one delivery.

    Everything is staged first (innings fold, player stats, scorecard)
    and committed only once the event is fully accepted, so a rejected
    event leaves no trace.
    """
    with store.match_lock(match_id):
        match = store.get_match(match_id)
        if match.status != "LIVE":
            raise InvalidStateError(
                f"Match is not in LIVE status (status={match.status})",
                details={"match_id": match_id, "status": match.status},
            )

        validate_labels(inning, over, ball, batsman_id, bowler_id, non_striker_id)
        delivery = classify(event, runs, wickets)

        innings_map = store.match_innings(match_id)
        current = innings_map.get(inning)

        if inning == "2" and "1" not in innings_map:
            raise InvalidStateError("Innings 2 cannot start before innings 1")
        if current is not None and current.state == "COMPLETE":
            raise InvalidStateError(f"Innings {inning} is already complete")

        batting_team, bowling_team = _sides(match, inning)
        if current is not None:
            batting_team, bowling_team = current.batting_team_id, current.bowling_team_id

        _check_side(store.get_player(batsman_id), batting_team, "batsman")
        if non_striker_id:
            _check_side(store.get_player(non_striker_id), batting_team, "non_striker")
        _check_side(store.get_player(bowler_id), bowling_team, "bowler")

        events = store.innings_events(current.id) if current is not None else []
        tally = replay(events)

        if over > match.overs_per_innings:
            raise ValidationError(f"over {over} exceeds the {match.overs_per_innings}-over limit")
        if over != tally.current_over_number:
            raise ValidationError(
                f"Expected over {tally.current_over_number}, got {over}",
                details={"expected_over": tally.current_over_number, "over": over},
            )

        # ---- stage innings ----
        if current is None:
            staged_innings = Innings(
                id=new_id("inning"),
                match_id=match_id,
                inning=inning,
                batting_team_id=batting_team,
                bowling_team_id=bowling_team,
            )
        else:
            staged_innings = dataclasses.replace(current)

        new_ball = BallEvent(
            id=new_id("ball"),
            match_id=match_id,
            innings_id=staged_innings.id,
            inning=inning,
            sequence=len(events) + 1,
            over=over,
            ball=ball,
            batsman_id=batsman_id,
            bowler_id=bowler_id,
            event=event,
            runs=delivery.total_runs,
            wickets=delivery.wicket,
            non_striker_id=non_striker_id,
            commentary=commentary,
        )

        new_tally = apply_ball(tally, new_ball, delivery)
        write_tally(staged_innings, new_tally)
        staged_innings.state = innings_state(new_tally, match.overs_per_innings)

        staged_map = dict(innings_map)
        staged_map[inning] = staged_innings

        # First ball of innings 2 closes innings 1
        closed_first = None
        if inning == "2" and current is None and innings_map["1"].state != "COMPLETE":
            closed_first = dataclasses.replace(innings_map["1"], state="COMPLETE")
            staged_map["1"] = closed_first

        events_by_innings = {inn.id: store.innings_events(inn.id) for inn in staged_map.values()}
        events_by_innings[staged_innings.id] = events + [new_ball]

        decided = None
        if inning == "2":
            first = replay(events_by_innings[staged_map["1"].id])
            decided = decide_result(match, first, new_tally, team_names=_team_names(store, match))
            if decided is not None:
                staged_innings.state = "COMPLETE"

        scorecard = compile_scorecard(match, staged_map.values(), events_by_innings)

        with store.stats_lock:
            ctx = build_match_context(store.match_events(match_id))
            staged_stats = {}
            for pid in {batsman_id, bowler_id, non_striker_id} - {None}:
                if pid in store.player_stats:
                    staged_stats[pid] = copy.deepcopy(store.player_stats[pid])
            apply_ball_to_stats(staged_stats, ctx, new_ball, delivery)

            # ---- commit ----
            store.player_stats.update(staged_stats)

        store.put_innings(staged_innings)
        if closed_first is not None:
            store.put_innings(closed_first)
            logger.info("Match %s: innings 1 closed at first ball of innings 2", match_id)
        store.append_event(new_ball)

        match.scorecard = scorecard
        match.result = scorecard["result"]

        if current is None:
            logger.info("Match %s: innings %s started (%s batting)", match_id, inning, batting_team)
        if staged_innings.state == "COMPLETE":
            logger.info(
                "Match %s: innings %s complete at %s", match_id, inning, result_text(new_tally.runs, new_tally.wickets)
            )

        if decided is not None:
            winner_id, summary = decided
            match.status = "COMPLETED"
            match.winner_id = winner_id
            match.result_summary = summary
            logger.info("Match %s completed: %s", match_id, summary)

        logger.debug(
            "Match %s inn %s: %s -> %s/%s (%s.%s)",
            match_id, inning, event, new_tally.runs, new_tally.wickets, new_tally.overs, new_tally.balls,
        )
        return new_ball


# -----------------------
# GetMatchScoring
# -----------------------
def get_match_scoring(store: LeagueStore, match_id: str) -> dict:
    """
    Match with its innings (ordered) and each innings' ordered ledger.

    Served without the match lock. Innings records are swapped wholesale on
    commit, and each innings' counters are re-folded from the same ledger
    snapshot that is returned, so a read never mixes two ball states.
    """
    match = store.get_match(match_id)
    innings_map = dict(store.match_innings(match_id))

    innings_out: List[dict] = []
    for number in sorted(innings_map):
        events = store.innings_events(innings_map[number].id)
        inn = dataclasses.replace(innings_map[number])
        write_tally(inn, replay(events))
        row = asdict(inn)
        row["ball_events"] = [asdict(b) for b in events]
        innings_out.append(row)

    out = asdict(match)
    out["innings"] = innings_out
    return out


def get_innings_state(store: LeagueStore, match_id: str, inning: str) -> Innings:
    """Copy of the current Innings record; no lock, the record is replaced whole on commit."""
    store.get_match(match_id)
    return dataclasses.replace(store.get_innings(match_id, inning))


# -----------------------
# Match status
# -----------------------
def update_match_status(
    store: LeagueStore,
    match_id: str,
    status: str,
    *,
    winner_id: Optional[str] = None,
) -> Match:
    if status not in MATCH_STATUSES:
        raise ValidationError(f"Invalid match status: {status}")

    with store.match_lock(match_id):
        match = store.get_match(match_id)
        allowed = ALLOWED_TRANSITIONS.get(match.status, frozenset())
        if status not in allowed:
            raise InvalidStateError(
                f"Cannot move match from {match.status} to {status}",
                details={"from": match.status, "to": status, "allowed": sorted(allowed)},
            )

        if winner_id is not None:
            if status != "COMPLETED":
                raise ValidationError("winner_id can only be set when completing a match")
            if winner_id not in (match.home_team_id, match.away_team_id):
                raise NotFoundError(f"Winner {winner_id} is not a side in match {match_id}")

        if status == "COMPLETED":
            _finalize(store, match, winner_id)

        logger.info("Match %s: %s -> %s", match_id, match.status, status)
        match.status = status
        return match


def _finalize(store: LeagueStore, match: Match, winner_id: Optional[str]) -> None:
    """Closes open innings and settles the result when completing by hand."""
    innings_map = store.match_innings(match.id)
    events_by_innings = {inn.id: store.innings_events(inn.id) for inn in innings_map.values()}

    closed = {n: dataclasses.replace(inn, state="COMPLETE") for n, inn in innings_map.items()}
    scorecard = compile_scorecard(match, closed.values(), events_by_innings)

    summary = None
    if winner_id is None and "1" in closed and "2" in closed:
        first = replay(events_by_innings[closed["1"].id])
        second = replay(events_by_innings[closed["2"].id])
        decided = decide_result(match, first, second, second_closed=True, team_names=_team_names(store, match))
        if decided is not None:
            winner_id, summary = decided
    elif winner_id is not None:
        summary = f"{_team_names(store, match)[winner_id]} won"

    for inn in closed.values():
        store.put_innings(inn)
    match.scorecard = scorecard
    match.result = scorecard["result"]
    match.winner_id = winner_id
    match.result_summary = summary
