import pytest

from league_api.errors import InvalidStateError
from league_api.innings_state import (
    InningsTally,
    apply_ball,
    innings_state,
    is_complete,
    replay,
)
from league_api.models import BallEvent


def _ball(code, seq=1, batsman="s1", non_striker="s2", bowler="b1", runs=None, wickets=0):
    if runs is None:
        runs = {"W": 0, "WD": 1, "NB": 1, "LB": 1, "BY": 1, "CB": 1}.get(code)
        if runs is None:
            runs = int(code)
    return BallEvent(
        id=f"ball{seq}",
        match_id="m1",
        innings_id="i1",
        inning="1",
        sequence=seq,
        over=1,
        ball=1,
        batsman_id=batsman,
        bowler_id=bowler,
        event=code,
        runs=runs,
        wickets=1 if code == "W" else wickets,
        non_striker_id=non_striker,
    )


def test_legal_ball_count_ignores_wides_and_no_balls():
    codes = ["1", "WD", "0", "NB", "4", "LB", "BY", "W", "2", "CB", "WD", "6"]
    tally = replay(_ball(c, i) for i, c in enumerate(codes, start=1))

    legal = len([c for c in codes if c not in ("WD", "NB")])
    assert tally.overs * 6 + tally.balls == legal
    assert (tally.overs, tally.balls) == (1, 3)
    assert tally.deliveries == len(codes)


def test_over_rolls_after_six_legal_balls():
    tally = replay(_ball("0", i) for i in range(1, 7))
    assert (tally.overs, tally.balls) == (1, 0)
    assert tally.current_over_number == 2


@pytest.mark.parametrize("code", ["1", "3", "5"])
def test_odd_runs_swap_strike(code):
    tally = apply_ball(InningsTally(), _ball(code))
    assert tally.striker_id == "s2"
    assert tally.non_striker_id == "s1"


@pytest.mark.parametrize("code", ["0", "2", "4", "6"])
def test_even_runs_keep_strike(code):
    tally = apply_ball(InningsTally(), _ball(code))
    assert tally.striker_id == "s1"
    assert tally.non_striker_id == "s2"


def test_single_wide_does_not_swap_but_leg_bye_does():
    assert apply_ball(InningsTally(), _ball("WD")).striker_id == "s1"
    assert apply_ball(InningsTally(), _ball("LB")).striker_id == "s2"


def test_wicket_vacates_the_slot_and_non_striker_takes_strike():
    tally = apply_ball(InningsTally(), _ball("W"))
    assert tally.wickets == 1
    assert tally.runs == 0
    assert tally.striker_id == "s2"
    assert tally.non_striker_id is None

    # next event names the new batsman, partner inferred
    tally = apply_ball(tally, _ball("0", 2, batsman="s3", non_striker=None))
    assert tally.striker_id == "s3"
    assert tally.non_striker_id == "s2"


def test_partner_is_inferred_when_not_named():
    tally = apply_ball(InningsTally(), _ball("1"))
    tally = apply_ball(tally, _ball("0", 2, batsman="s2", non_striker=None))
    assert tally.striker_id == "s2"
    assert tally.non_striker_id == "s1"


def test_scenario_first_over():
    balls = [
        _ball("0", 1),
        _ball("1", 2),
        _ball("4", 3),
        _ball("W", 4),
        _ball("6", 5, batsman="s3", non_striker="s2"),
    ]
    tally = replay(balls)
    assert tally.runs == 11
    assert tally.wickets == 1
    assert tally.overs == 0
    assert tally.balls == 5
    assert tally.extras == 0


def test_wickets_never_exceed_ten():
    tally = replay(_ball("W", i) for i in range(1, 11))
    assert tally.wickets == 10
    assert is_complete(tally, overs_limit=20)
    with pytest.raises(InvalidStateError):
        apply_ball(tally, _ball("W", 11))


def test_counters_are_monotonic():
    codes = ["1", "WD", "W", "0", "NB", "6", "LB"]
    tally = InningsTally()
    for i, c in enumerate(codes, start=1):
        nxt = apply_ball(tally, _ball(c, i))
        assert nxt.runs >= tally.runs
        assert nxt.wickets >= tally.wickets
        assert nxt.legal_balls >= tally.legal_balls
        tally = nxt


def test_innings_state_transitions():
    assert innings_state(None, 5) == "NOT_STARTED"
    assert innings_state(InningsTally(), 5) == "NOT_STARTED"

    tally = replay(_ball("0", i) for i in range(1, 4))
    assert innings_state(tally, 5) == "IN_PROGRESS"

    tally = replay(_ball("0", i) for i in range(1, 31))
    assert innings_state(tally, 5) == "COMPLETE"
