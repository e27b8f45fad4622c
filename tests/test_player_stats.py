from league_api.models import BallEvent, PlayerStat
from league_api.player_stats import (
    MatchContext,
    apply_ball_to_stats,
    batting_rankings,
    bowling_rankings,
    build_match_context,
    stat_to_dict,
)

RUNS = {"W": 0, "WD": 1, "NB": 1, "LB": 1, "BY": 1, "CB": 1}


def _ball(code, seq, *, match_id="m1", inning="1", batsman="s1", non_striker="s2", bowler="b1"):
    return BallEvent(
        id=f"{match_id}-{seq}",
        match_id=match_id,
        innings_id=f"{match_id}-{inning}",
        inning=inning,
        sequence=seq,
        over=1,
        ball=1,
        batsman_id=batsman,
        bowler_id=bowler,
        event=code,
        runs=RUNS.get(code, int(code) if code.isdigit() else 0),
        wickets=1 if code == "W" else 0,
        non_striker_id=non_striker,
    )


def _play(stats, balls, ctx=None):
    ctx = ctx if ctx is not None else MatchContext()
    for b in balls:
        apply_ball_to_stats(stats, ctx, b)
    return ctx


def test_new_rows_start_at_zero():
    stats = {}
    _play(stats, [_ball("0", 1)])
    assert set(stats) == {"s1", "s2", "b1"}
    assert stats["s2"].runs == 0
    assert stats["s2"].balls_faced == 0
    assert stats["s2"].matches == 1
    assert stats["s2"].batting_innings == 1


def test_wicket_never_adds_batting_runs():
    stats = {}
    _play(stats, [_ball("4", 1), _ball("W", 2)])
    assert stats["s1"].runs == 4
    assert stats["s1"].balls_faced == 1
    assert stats["s1"].dismissals == 1
    assert stats["b1"].wickets == 1


def test_matches_counted_once_per_match():
    stats = {}
    _play(stats, [_ball("1", i) for i in range(1, 6)])
    assert stats["s1"].matches == 1
    assert stats["b1"].matches == 1

    _play(stats, [_ball("1", 1, match_id="m2")])
    assert stats["s1"].matches == 2


def test_context_rebuilt_from_ledger_matches_live_context():
    balls = [_ball("1", 1), _ball("4", 2), _ball("W", 3)]
    live = _play({}, balls)
    rebuilt = build_match_context(balls)
    assert live == rebuilt


def test_milestones_and_highest_score():
    stats = {}
    balls = [_ball("6", i) for i in range(1, 10)]  # 54
    ctx = _play(stats, balls)
    assert stats["s1"].half_centuries == 1
    assert stats["s1"].centuries == 0
    assert stats["s1"].highest_score == 54

    _play(stats, [_ball("6", i) for i in range(10, 19)], ctx)  # 108
    assert stats["s1"].half_centuries == 1
    assert stats["s1"].centuries == 1
    assert stats["s1"].highest_score == 108
    assert stats["s1"].sixes == 18


def test_bowling_counters_are_separate_from_batting():
    stats = {}
    _play(stats, [_ball("4", 1), _ball("WD", 2), _ball("LB", 3), _ball("W", 4)])
    bowler = stats["b1"]
    assert bowler.balls_bowled == 3
    assert bowler.runs_conceded == 5
    assert bowler.wickets == 1
    assert bowler.runs == 0
    assert bowler.economy == 10.0
    assert bowler.bowling_average == 5.0


def test_best_bowling_uses_final_match_figures():
    stats = {}
    _play(stats, [_ball("W", 1), _ball("6", 2)])
    assert stats["b1"].best_bowling == "1/6"

    _play(stats, [_ball("W", 1, match_id="m2"), _ball("W", 2, match_id="m2"), _ball("4", 3, match_id="m2")])
    assert stats["b1"].best_bowling == "2/4"

    no_wicket = PlayerStat(player_id="x", bowling_by_match={"m1": (0, 10)})
    assert no_wicket.best_bowling == "-"


def test_rankings():
    a = PlayerStat(player_id="a", runs=120, matches=3)
    b = PlayerStat(player_id="b", runs=300, matches=5)
    c = PlayerStat(player_id="c", balls_bowled=24, runs_conceded=20, wickets=3)
    d = PlayerStat(player_id="d", balls_bowled=24, runs_conceded=40, wickets=3)

    batting = batting_rankings([a, b, c, d])
    assert [r["player_id"] for r in batting[:2]] == ["b", "a"]
    assert batting[0]["rank"] == 1

    bowling = bowling_rankings([a, b, c, d])
    assert [r["player_id"] for r in bowling] == ["c", "d"]


def test_stat_to_dict_shape():
    row = PlayerStat(player_id="p", runs=40, balls_faced=20, dismissals=2)
    out = stat_to_dict(row)
    assert out["batting"]["average"] == 20.0
    assert out["batting"]["strike_rate"] == 200.0
    assert out["bowling"]["average"] is None
    assert out["bowling"]["best"] == "-"
