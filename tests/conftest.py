from __future__ import annotations

import pytest

from league_api.scoring import record_ball_event, update_match_status
from league_api.store import LeagueStore


@pytest.fixture
def store():
    return LeagueStore()


@pytest.fixture
def league(store):
    """Two teams of eleven: home players h1..h11, away players a1..a11."""
    store.add_team("Home XI", "HOM", team_id="home")
    store.add_team("Away XI", "AWY", team_id="away")
    for i in range(1, 12):
        store.add_player("home", f"Home Player {i}", i, player_id=f"h{i}")
        store.add_player("away", f"Away Player {i}", i, player_id=f"a{i}")
    return store


@pytest.fixture
def live_match(league):
    match = league.add_match("home", "away", overs_per_innings=5)
    update_match_status(league, match.id, "LIVE")
    return match


@pytest.fixture
def bowl(store):
    """
    Records a list of event codes in order, deriving the over label from
    the innings' current legal-ball count.
    """
    def _bowl(match_id, codes, *, inning="1", batsman="h1", non_striker="h2", bowler="a1", runs=None):
        out = []
        for code in codes:
            inn = store.match_innings(match_id).get(inning)
            legal = 0 if inn is None else inn.overs * 6 + inn.balls
            out.append(record_ball_event(
                store,
                match_id,
                inning=inning,
                over=legal // 6 + 1,
                ball=legal % 6 + 1,
                batsman_id=batsman,
                bowler_id=bowler,
                non_striker_id=non_striker,
                event=code,
                runs=runs,
            ))
        return out

    return _bowl
