# league_api/scorecard.py
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from league_api.ball_events import classify_event, extras_breakdown
from league_api.config import MAX_WICKETS
from league_api.innings_state import InningsTally, apply_ball, is_complete
from league_api.models import BallEvent, Innings, Match
from league_api.overs_math import (
    BALLS_PER_OVER,
    balls_to_overs_str,
    projected_score,
    required_run_rate,
    run_rate,
)


def result_text(runs: int, wickets: int) -> str:
    if wickets >= MAX_WICKETS:
        return f"All Out for {runs}"
    return f"{runs}/{wickets}"


def _batting_card(events: List[BallEvent]) -> List[dict]:
    # insertion order == order of first appearance
    card: Dict[str, dict] = {}

    def entry(pid: str) -> dict:
        if pid not in card:
            card[pid] = {"player_id": pid, "runs": 0, "balls": 0, "fours": 0, "sixes": 0, "out": False}
        return card[pid]

    for ball in events:
        d = classify_event(ball)
        row = entry(ball.batsman_id)
        if ball.non_striker_id:
            entry(ball.non_striker_id)

        if d.is_wicket:
            row["out"] = True
        elif d.legal:
            row["balls"] += 1
            row["runs"] += d.bat_runs
            if d.event == "4":
                row["fours"] += 1
            elif d.event == "6":
                row["sixes"] += 1

    for row in card.values():
        row["strike_rate"] = round(row["runs"] / row["balls"] * 100, 2) if row["balls"] else 0.0
    return list(card.values())


def _bowling_card(events: List[BallEvent]) -> List[dict]:
    card: Dict[str, dict] = {}
    for ball in events:
        d = classify_event(ball)
        row = card.setdefault(ball.bowler_id, {"player_id": ball.bowler_id, "legal_balls": 0, "runs": 0, "wickets": 0})
        row["legal_balls"] += 1 if d.legal else 0
        row["runs"] += d.bowler_runs
        row["wickets"] += d.wicket

    out = []
    for row in card.values():
        legal = row.pop("legal_balls")
        row["overs"] = balls_to_overs_str(legal)
        row["economy"] = round(run_rate(row["runs"], legal), 2)
        out.append(row)
    return out


def compile_innings(innings: Innings, events: List[BallEvent], overs_limit: int) -> Tuple[InningsTally, dict]:
    """Fold the innings ledger and summarise it."""
    tally = InningsTally()
    deliveries = []
    for ball in events:
        d = classify_event(ball)
        tally = apply_ball(tally, ball, d)
        deliveries.append(d)

    summary = {
        "inning": innings.inning,
        "batting_team_id": innings.batting_team_id,
        "bowling_team_id": innings.bowling_team_id,
        "state": innings.state,
        "runs": tally.runs,
        "wickets": tally.wickets,
        "overs": tally.overs,
        "balls": tally.balls,
        "overs_display": balls_to_overs_str(tally.legal_balls),
        "legal_balls": tally.legal_balls,
        "run_rate": round(run_rate(tally.runs, tally.legal_balls), 2),
        "projected_score": projected_score(tally.runs, tally.legal_balls, overs_limit),
        "extras": tally.extras,
        "extras_breakdown": extras_breakdown(deliveries),
        "result": result_text(tally.runs, tally.wickets),
        "batting": _batting_card(events),
        "bowling": _bowling_card(events),
    }
    return tally, summary


def decide_result(
    match: Match,
    first: Optional[InningsTally],
    second: Optional[InningsTally],
    *,
    second_closed: bool = False,
    team_names: Optional[Mapping[str, str]] = None,
) -> Optional[Tuple[Optional[str], str]]:
    """
    Returns (winner_id, summary) once the match is decided, else None.

    Innings 1 belongs to the home side, innings 2 to the away side.
    winner_id is None for a tie.
    """
    if first is None or second is None:
        return None

    names = team_names or {}
    home = names.get(match.home_team_id, match.home_team_id)
    away = names.get(match.away_team_id, match.away_team_id)

    if second.runs > first.runs:
        margin = MAX_WICKETS - second.wickets
        return match.away_team_id, f"{away} won by {margin} wicket{'s' if margin != 1 else ''}"

    if not (second_closed or is_complete(second, match.overs_per_innings)):
        return None

    if first.runs > second.runs:
        margin = first.runs - second.runs
        return match.home_team_id, f"{home} won by {margin} run{'s' if margin != 1 else ''}"

    return None, "Match tied"


def compile_scorecard(
    match: Match,
    innings: Iterable[Innings],
    events_by_innings: Mapping[str, List[BallEvent]],
) -> dict:
    """
    Rebuild the whole match summary from the ledger. Never patched in place.
    """
    ordered = sorted(innings, key=lambda inn: inn.inning)

    summaries: List[dict] = []
    tallies: Dict[str, InningsTally] = {}
    for inn in ordered:
        tally, summary = compile_innings(inn, list(events_by_innings.get(inn.id, [])), match.overs_per_innings)
        tallies[inn.inning] = tally
        summaries.append(summary)

    first = tallies.get("1")
    second = tallies.get("2")
    if first is not None and second is not None:
        target = first.runs + 1
        balls_left = max(0, match.overs_per_innings * BALLS_PER_OVER - second.legal_balls)
        needed = max(0, target - second.runs)
        rrr = required_run_rate(needed, balls_left)
        chase = summaries[-1]
        chase["target"] = target
        chase["runs_required"] = needed
        chase["balls_remaining"] = balls_left
        chase["required_run_rate"] = round(rrr, 2) if rrr is not None else None

    total_runs = sum(t.runs for t in tallies.values())
    total_wickets = sum(t.wickets for t in tallies.values())
    total_legal = sum(t.legal_balls for t in tallies.values())

    return {
        "match_id": match.id,
        "overs_per_innings": match.overs_per_innings,
        "innings": summaries,
        "total_runs": total_runs,
        "total_wickets": total_wickets,
        "total_overs": sum(t.overs for t in tallies.values()),
        "total_balls": total_legal,
        # match-level string is built from the grand totals; each innings keeps its own
        "result": result_text(total_runs, total_wickets) if summaries else None,
    }
