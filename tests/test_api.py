import pytest
from fastapi.testclient import TestClient

import main


@pytest.fixture
def client():
    main.store.reset()
    with TestClient(main.app) as c:
        yield c
    main.store.reset()


def _seed(client):
    ids = {}
    for side, name in (("home", "Home XI"), ("away", "Away XI")):
        resp = client.post("/api/teams", json={"name": name})
        assert resp.status_code == 201
        ids[side] = resp.json()["id"]
        players = []
        for i in range(1, 4):
            r = client.post(f"/api/teams/{ids[side]}/players", json={"name": f"{name} {i}", "jersey_number": i})
            assert r.status_code == 201
            players.append(r.json()["id"])
        ids[f"{side}_players"] = players
    return ids


def _ball(ids, match_id, over, ball, event, **extra):
    body = {
        "match_id": match_id,
        "inning": "1",
        "over": over,
        "ball": ball,
        "batsman_id": ids["home_players"][0],
        "non_striker_id": ids["home_players"][1],
        "bowler_id": ids["away_players"][2],
        "event": event,
    }
    body.update(extra)
    return body


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_duplicate_team_name_conflicts(client):
    assert client.post("/api/teams", json={"name": "Rovers"}).status_code == 201
    resp = client.post("/api/teams", json={"name": "rovers"})
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"] == "ConflictError"


def test_scoring_flow(client):
    ids = _seed(client)
    match = client.post(
        "/api/matches",
        json={"home_team_id": ids["home"], "away_team_id": ids["away"], "overs_per_innings": 5},
    ).json()

    # not LIVE yet
    resp = client.post("/api/scoring/ball", json=_ball(ids, match["id"], 1, 1, "1"))
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"] == "InvalidState"

    assert client.post(f"/api/matches/{match['id']}/status", json={"status": "LIVE"}).status_code == 200

    resp = client.post("/api/scoring/ball", json=_ball(ids, match["id"], 1, 1, "4"))
    assert resp.status_code == 201
    body = resp.json()
    assert body["ball_event"]["runs"] == 4
    assert body["innings"]["runs"] == 4
    assert body["match_status"] == "LIVE"
    assert body["scorecard"]["result"] == "4/0"

    resp = client.post("/api/scoring/ball", json=_ball(ids, match["id"], 1, 2, "XX"))
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "ValidationError"

    resp = client.post("/api/scoring/ball", json=_ball(ids, match["id"], 1, 2, "WD"))
    assert resp.status_code == 201
    assert resp.json()["innings"]["extras"] == 1

    state = client.get(f"/api/scoring/match/{match['id']}/innings/1").json()
    assert (state["runs"], state["overs"], state["balls"]) == (5, 0, 1)

    scoring = client.get(f"/api/scoring/match/{match['id']}").json()
    assert [b["event"] for b in scoring["innings"][0]["ball_events"]] == ["4", "WD"]

    stats = client.get(f"/api/players/{ids['home_players'][0]}/stats").json()
    assert stats["stats"]["batting"]["runs"] == 4

    rankings = client.get("/api/rankings/players", params={"type": "bowling"}).json()
    assert rankings["rankings"][0]["player_id"] == ids["away_players"][2]


def test_unknown_match_is_404(client):
    ids = _seed(client)
    resp = client.post("/api/scoring/ball", json=_ball(ids, "missing", 1, 1, "1"))
    assert resp.status_code == 404
    assert client.get("/api/matches/missing").status_code == 404


def test_tournament_flow(client):
    team_ids = [client.post("/api/teams", json={"name": f"Club {i}"}).json()["id"] for i in range(1, 5)]
    t = client.post(
        "/api/tournaments",
        json={"name": "Spring League", "format": "LEAGUE", "max_teams": 4, "min_teams": 2, "overs_per_match": 10},
    )
    assert t.status_code == 201
    tid = t.json()["id"]

    for team_id in team_ids[:3]:
        assert client.post(f"/api/tournaments/{tid}/join", json={"team_id": team_id}).status_code == 201

    resp = client.post(f"/api/tournaments/{tid}/join", json={"team_id": team_ids[0]})
    assert resp.status_code == 409

    started = client.post(f"/api/tournaments/{tid}/start")
    assert started.status_code == 200
    assert started.json()["fixtures_count"] == 3

    assert client.post(f"/api/tournaments/{tid}/start").status_code == 409

    detail = client.get(f"/api/tournaments/{tid}").json()
    assert detail["status"] == "ONGOING"
    assert len(detail["matches"]) == 3
    assert len(detail["standings"]) == 3

    standings = client.get(f"/api/tournaments/{tid}/standings").json()["standings"]
    assert all(row["points"] == 0 for row in standings)
