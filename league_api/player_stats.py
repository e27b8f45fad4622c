# league_api/player_stats.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from league_api.ball_events import Delivery, classify_event
from league_api.models import BallEvent, PlayerStat

HALF_CENTURY = 50
CENTURY = 100


@dataclass
class MatchContext:
    """
    What the ledger of one match says before the next ball is applied.
    Rebuilt from the BallEvents, so it never drifts from the ledger.
    """
    participants: Set[str] = field(default_factory=set)
    innings_batters: Set[Tuple[str, str]] = field(default_factory=set)
    # (inning, batsman) -> runs in that innings
    batting_scores: Dict[Tuple[str, str], int] = field(default_factory=dict)


def _involved(ball: BallEvent) -> List[str]:
    out = [ball.batsman_id, ball.bowler_id]
    if ball.non_striker_id:
        out.append(ball.non_striker_id)
    return out


def advance_context(ctx: MatchContext, ball: BallEvent, d: Delivery) -> None:
    ctx.participants.update(_involved(ball))

    ctx.innings_batters.add((ball.inning, ball.batsman_id))
    if ball.non_striker_id:
        ctx.innings_batters.add((ball.inning, ball.non_striker_id))

    key = (ball.inning, ball.batsman_id)
    ctx.batting_scores[key] = ctx.batting_scores.get(key, 0) + d.bat_runs


def build_match_context(events: Iterable[BallEvent]) -> MatchContext:
    ctx = MatchContext()
    for ball in events:
        advance_context(ctx, ball, classify_event(ball))
    return ctx


def _row(stats: Dict[str, PlayerStat], player_id: str) -> PlayerStat:
    row = stats.get(player_id)
    if row is None:
        row = PlayerStat(player_id=player_id)
        stats[player_id] = row
    return row


def _credit_appearances(stats: Dict[str, PlayerStat], ctx: MatchContext, ball: BallEvent) -> None:
    for pid in _involved(ball):
        if pid not in ctx.participants:
            _row(stats, pid).matches += 1

    batters = [ball.batsman_id] + ([ball.non_striker_id] if ball.non_striker_id else [])
    for pid in batters:
        if (ball.inning, pid) not in ctx.innings_batters:
            _row(stats, pid).batting_innings += 1


def _update_batting(row: PlayerStat, ctx: MatchContext, ball: BallEvent, d: Delivery) -> None:
    if d.is_wicket:
        row.dismissals += 1
        return

    if not d.legal:
        return

    row.balls_faced += 1
    row.runs += d.bat_runs
    if d.event == "4":
        row.fours += 1
    elif d.event == "6":
        row.sixes += 1

    before = ctx.batting_scores.get((ball.inning, ball.batsman_id), 0)
    after = before + d.bat_runs
    if after > row.highest_score:
        row.highest_score = after
    # half_centuries counts every innings reaching 50, centuries included
    if before < HALF_CENTURY <= after:
        row.half_centuries += 1
    if before < CENTURY <= after:
        row.centuries += 1


def _update_bowling(row: PlayerStat, ball: BallEvent, d: Delivery) -> None:
    if d.legal:
        row.balls_bowled += 1
    row.runs_conceded += d.bowler_runs
    row.wickets += d.wicket

    w, r = row.bowling_by_match.get(ball.match_id, (0, 0))
    row.bowling_by_match[ball.match_id] = (w + d.wicket, r + d.bowler_runs)


def apply_ball_to_stats(
    stats: Dict[str, PlayerStat],
    ctx: MatchContext,
    ball: BallEvent,
    delivery: Optional[Delivery] = None,
) -> None:
    """
    Updates PlayerStat rows in `stats` (created on first sight) for one ball,
    then advances `ctx`. Counters only ever grow.

    Callers stage `stats` as copies and commit them once the whole event
    has been accepted.
    """
    d = delivery if delivery is not None else classify_event(ball)

    _credit_appearances(stats, ctx, ball)
    _update_batting(_row(stats, ball.batsman_id), ctx, ball, d)
    _update_bowling(_row(stats, ball.bowler_id), ball, d)

    advance_context(ctx, ball, d)


def stat_to_dict(row: PlayerStat) -> dict:
    bowling_avg = row.bowling_average
    return {
        "player_id": row.player_id,
        "matches": row.matches,
        "batting": {
            "innings": row.batting_innings,
            "runs": row.runs,
            "balls_faced": row.balls_faced,
            "fours": row.fours,
            "sixes": row.sixes,
            "dismissals": row.dismissals,
            "highest_score": row.highest_score,
            "half_centuries": row.half_centuries,
            "centuries": row.centuries,
            "average": round(row.batting_average, 2),
            "strike_rate": round(row.strike_rate, 2),
        },
        "bowling": {
            "balls_bowled": row.balls_bowled,
            "runs_conceded": row.runs_conceded,
            "wickets": row.wickets,
            "economy": round(row.economy, 2),
            "average": round(bowling_avg, 2) if bowling_avg is not None else None,
            "best": row.best_bowling,
        },
    }


def batting_rankings(rows: Iterable[PlayerStat], limit: int = 20) -> List[dict]:
    """Runs desc, then matches desc (stable for equal keys)."""
    ranked = sorted(rows, key=lambda r: (r.runs, r.matches), reverse=True)
    return [{"rank": i, **stat_to_dict(r)} for i, r in enumerate(ranked[:limit], start=1)]


def bowling_rankings(rows: Iterable[PlayerStat], limit: int = 20) -> List[dict]:
    """Wickets desc, then economy asc for bowlers who have bowled."""
    bowled = [r for r in rows if r.balls_bowled > 0]
    ranked = sorted(bowled, key=lambda r: (-r.wickets, r.economy))
    return [{"rank": i, **stat_to_dict(r)} for i, r in enumerate(ranked[:limit], start=1)]
