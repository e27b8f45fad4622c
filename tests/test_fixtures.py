import random

import pytest

from league_api.errors import ValidationError
from league_api.fixtures import (
    generate_fixtures,
    keep_order,
    knockout_fixtures,
    random_shuffle,
)
from league_api.models import Team


def _teams(n):
    return [Team(id=f"t{i}", name=f"Team {i}", short_name=f"T{i}") for i in range(1, n + 1)]


def test_league_every_pair_once_in_registration_order():
    teams = _teams(4)
    stubs = generate_fixtures(teams, "LEAGUE")

    assert len(stubs) == 6
    pairs = [(s.home_team_id, s.away_team_id) for s in stubs]
    assert pairs == [
        ("t1", "t2"), ("t1", "t3"), ("t1", "t4"),
        ("t2", "t3"), ("t2", "t4"),
        ("t3", "t4"),
    ]
    assert len({frozenset(p) for p in pairs}) == 6
    assert [s.match_number for s in stubs] == [1, 2, 3, 4, 5, 6]
    assert [s.round for s in stubs] == [1, 1, 2, 2, 2, 3]
    assert stubs[0].title == "Team 1 vs Team 2"


def test_double_league_swaps_home_and_continues_numbering():
    stubs = generate_fixtures(_teams(4), "DOUBLE_LEAGUE")

    assert len(stubs) == 12
    assert [s.match_number for s in stubs] == list(range(1, 13))

    first, second = stubs[:6], stubs[6:]
    for a, b in zip(first, second):
        assert (b.home_team_id, b.away_team_id) == (a.away_team_id, a.home_team_id)
        assert b.title.endswith("(Second leg)")
    assert second[0].match_number == 7


def test_knockout_odd_team_sits_out():
    stubs = generate_fixtures(_teams(5), "KNOCKOUT", shuffle=keep_order)

    assert len(stubs) == 2
    assert [(s.home_team_id, s.away_team_id) for s in stubs] == [("t1", "t2"), ("t3", "t4")]
    assert all(s.round == 1 for s in stubs)
    assert [s.match_number for s in stubs] == [1, 2]
    assert stubs[0].title == "Round 1 - Team 1 vs Team 2"


def test_knockout_seeded_draw_is_reproducible():
    teams = _teams(8)
    a = knockout_fixtures(teams, random_shuffle(seed=42))
    b = knockout_fixtures(teams, random_shuffle(rng=random.Random(42)))
    assert a == b

    used = [t for s in a for t in (s.home_team_id, s.away_team_id)]
    assert sorted(used) == sorted(t.id for t in teams)


def test_shuffle_does_not_mutate_roster():
    teams = _teams(6)
    before = list(teams)
    knockout_fixtures(teams, random_shuffle(seed=7))
    assert teams == before


@pytest.mark.parametrize("fmt", ["KNOCKOUT", "LEAGUE", "DOUBLE_LEAGUE"])
def test_fewer_than_two_teams_rejected(fmt):
    with pytest.raises(ValidationError):
        generate_fixtures(_teams(1), fmt)


def test_unknown_format_and_duplicates_rejected():
    with pytest.raises(ValidationError):
        generate_fixtures(_teams(4), "ROUND_ROBIN")

    teams = _teams(2)
    with pytest.raises(ValidationError):
        generate_fixtures(teams + [teams[0]], "LEAGUE")
