"""
API tests for season scheduling endpoints

Error mapping:
- unknown season/match -> 404
- caller errors (config, roster, input) -> 400
- inconsistent result -> 422
"""

from fastapi.testclient import TestClient
from sqlmodel import Session

from season_engine.models import Match, MatchStatus

ROUND_ROBIN = {
    "format": {"type": "straight_round_robin"},
    "schedule": {"cadence": "weekly", "startDate": "2026-01-05"},
}


def _roster(season):
    return [t.id for t in sorted(season.teams, key=lambda t: t.roster_position)]


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# ============================================================================
# Generate
# ============================================================================


def test_generate_schedule(client: TestClient, make_season):
    season = make_season(["A", "B", "C", "D"], competition=ROUND_ROBIN)

    response = client.post(f"/api/seasons/{season.id}/schedule/generate")

    assert response.status_code == 200
    data = response.json()
    assert data["created"] == 6
    assert data["cleared"] == 0
    assert data["destructive"] is False
    assert data["regular_season_rounds"] == 3
    assert "legs" in data["applied_defaults"]


def test_generate_reports_cleared(client: TestClient, session: Session, make_season):
    season = make_season(["A", "B", "C", "D"], competition=ROUND_ROBIN)
    client.post(f"/api/seasons/{season.id}/schedule/generate")

    response = client.post(f"/api/seasons/{season.id}/schedule/generate", json={"regenerate": True})

    assert response.status_code == 200
    assert response.json()["cleared"] == 6
    assert response.json()["destructive"] is True


def test_generate_with_body_override(client: TestClient, make_season):
    season = make_season(["A", "B", "C", "D"])

    response = client.post(
        f"/api/seasons/{season.id}/schedule/generate",
        json={"competition": {"format": {"type": "round_robin_double_split"}, "startDate": "2026-02-01"}},
    )

    assert response.status_code == 200
    assert response.json()["created"] == 12


def test_generate_unknown_season(client: TestClient):
    response = client.post("/api/seasons/9999/schedule/generate")
    assert response.status_code == 404


def test_generate_without_config(client: TestClient, make_season):
    season = make_season(["A", "B"])
    response = client.post(f"/api/seasons/{season.id}/schedule/generate")
    assert response.status_code == 400


def test_generate_with_one_team(client: TestClient, make_season):
    season = make_season(["A"], competition=ROUND_ROBIN)
    response = client.post(f"/api/seasons/{season.id}/schedule/generate")
    assert response.status_code == 400
    assert "at least 2 teams" in response.json()["detail"]


def test_generate_bad_cadence(client: TestClient, make_season):
    season = make_season(["A", "B"], competition={"schedule": {"cadence": "hourly"}})
    response = client.post(f"/api/seasons/{season.id}/schedule/generate")
    assert response.status_code == 400


# ============================================================================
# Matches / results / standings
# ============================================================================


def test_list_matches_with_filters(client: TestClient, make_season):
    season = make_season(["A", "B", "C", "D"], competition=ROUND_ROBIN)
    client.post(f"/api/seasons/{season.id}/schedule/generate")

    all_matches = client.get(f"/api/seasons/{season.id}/matches").json()
    assert len(all_matches) == 6
    assert [m["round"] for m in all_matches] == [1, 1, 2, 2, 3, 3]

    round_two = client.get(f"/api/seasons/{season.id}/matches", params={"round": 2}).json()
    assert len(round_two) == 2

    completed = client.get(f"/api/seasons/{season.id}/matches", params={"status": "Completed"}).json()
    assert completed == []

    a = _roster(season)[0]
    for_a = client.get(f"/api/seasons/{season.id}/matches", params={"team_id": a}).json()
    assert len(for_a) == 3
    assert all(a in (m["team_a_id"], m["team_b_id"]) for m in for_a)


def test_list_matches_unknown_season(client: TestClient):
    assert client.get("/api/seasons/4242/matches").status_code == 404


def test_calendar(client: TestClient, make_season):
    season = make_season(["A", "B", "C", "D"], competition=ROUND_ROBIN)
    client.post(f"/api/seasons/{season.id}/schedule/generate")

    response = client.get(
        f"/api/seasons/{season.id}/matches/calendar", params={"from": "2026-01-06", "to": "2026-01-31"}
    )

    assert response.status_code == 200
    assert [(d["date"], len(d["matches"])) for d in response.json()] == [("2026-01-12", 2), ("2026-01-19", 2)]


def test_result_flow_updates_standings(client: TestClient, make_season):
    season = make_season(["A", "B", "C", "D"], competition=ROUND_ROBIN)
    a, b, c, d = _roster(season)
    client.post(f"/api/seasons/{season.id}/schedule/generate")
    round_one = client.get(f"/api/seasons/{season.id}/matches", params={"round": 1}).json()

    # Round 1 is A v D and B v C
    ad = next(m for m in round_one if {m["team_a_id"], m["team_b_id"]} == {a, d})
    bc = next(m for m in round_one if {m["team_a_id"], m["team_b_id"]} == {b, c})

    response = client.patch(
        f"/api/matches/{ad['id']}/result", json={"winner_team_id": d, "score_team_a": 0, "score_team_b": 2}
    )
    assert response.status_code == 200
    assert response.json()["status"] == MatchStatus.completed.value

    client.patch(f"/api/matches/{bc['id']}/result", json={"winner_team_id": None})

    standings = client.get(f"/api/seasons/{season.id}/standings").json()
    assert standings["sort_by"] == "points"
    assert [(r["rank"], r["name"], r["points"]) for r in standings["rows"]] == [
        (1, "D", 3),
        (2, "B", 1),
        (3, "C", 1),
        (4, "A", 0),
    ]

    by_name = client.get(f"/api/seasons/{season.id}/standings", params={"sort_by": "name"}).json()
    assert [r["name"] for r in by_name["rows"]] == ["A", "B", "C", "D"]


def test_standings_rejects_unknown_sort(client: TestClient, make_season):
    season = make_season(["A", "B"])
    response = client.get(f"/api/seasons/{season.id}/standings", params={"sort_by": "goal_diff"})
    assert response.status_code == 422


def test_result_errors(client: TestClient, session: Session, make_season):
    season = make_season(["A", "B", "C"])
    a, b, c = _roster(season)
    match = Match(league_id=season.league_id, season_id=season.id, round=1, team_a_id=a, team_b_id=b)
    session.add(match)
    session.commit()

    assert client.patch("/api/matches/99999/result", json={"winner_team_id": a}).status_code == 404
    assert client.patch(f"/api/matches/{match.id}/result", json={"winner_team_id": c}).status_code == 422


# ============================================================================
# Seeding + manual playoffs
# ============================================================================


def test_seed_playoffs_and_create_manual_final(client: TestClient, make_season):
    competition = dict(ROUND_ROBIN, playoffs={"enabled": True, "teams": 2, "seeding": "manual"})
    season = make_season(["A", "B", "C", "D"], competition=competition)
    a, b, c, d = _roster(season)

    generated = client.post(f"/api/seasons/{season.id}/schedule/generate").json()
    assert generated["playoff_matches"] == 0
    assert [w["code"] for w in generated["warnings"]] == ["PLAYOFFS_MANUAL_SEEDING"]

    seeding = client.post(f"/api/seasons/{season.id}/playoffs/seed").json()
    assert seeding["team_ids"] == [a, b]
    assert seeding["source"] == "roster"
    assert [w["code"] for w in seeding["warnings"]] == ["MANUAL_SEEDING_SUGGESTION"]

    created = client.post(
        f"/api/seasons/{season.id}/matches",
        json={"round": 4, "team_a_id": c, "team_b_id": a, "scheduled_at": "2026-02-01T19:00:00Z"},
    )
    assert created.status_code == 201
    assert created.json()["round"] == 4
    assert len(client.get(f"/api/seasons/{season.id}/matches").json()) == 7


def test_seed_playoffs_roster_fallback(client: TestClient, make_season):
    season = make_season(["A", "B", "C"], competition={"playoffs": {"enabled": True, "teams": 2}})
    a, b, c = _roster(season)

    response = client.post(f"/api/seasons/{season.id}/playoffs/seed")

    assert response.status_code == 200
    assert response.json()["team_ids"] == [a, b]
    assert response.json()["source"] == "roster"


def test_create_match_bad_team(client: TestClient, make_season):
    season = make_season(["A", "B"])
    a, b = _roster(season)
    response = client.post(f"/api/seasons/{season.id}/matches", json={"round": 1, "team_a_id": a, "team_b_id": a})
    assert response.status_code == 400


def test_import_replace(client: TestClient, make_season):
    season = make_season(["A", "B", "C", "D"], competition=ROUND_ROBIN)
    a, b, c, d = _roster(season)
    client.post(f"/api/seasons/{season.id}/schedule/generate")

    response = client.post(
        f"/api/seasons/{season.id}/matches/import",
        json={
            "mode": "replace",
            "matches": [
                {"round": 1, "team_a_id": a, "team_b_id": b},
                {"round": 1, "team_a_id": c, "team_b_id": d},
            ],
        },
    )

    assert response.status_code == 200
    assert response.json() == {"created": 2, "replaced": 6}
    assert len(client.get(f"/api/seasons/{season.id}/matches").json()) == 2


def test_import_append_default(client: TestClient, make_season):
    season = make_season(["A", "B"])
    a, b = _roster(season)

    response = client.post(
        f"/api/seasons/{season.id}/matches/import", json={"matches": [{"round": 1, "team_a_id": a, "team_b_id": b}]}
    )

    assert response.status_code == 200
    assert response.json() == {"created": 1, "replaced": None}


def test_update_match_date_and_status(client: TestClient, make_season):
    season = make_season(["A", "B"])
    a, b = _roster(season)
    match = client.post(f"/api/seasons/{season.id}/matches", json={"round": 2, "team_a_id": a, "team_b_id": b}).json()
    assert match["scheduled_at"] is None

    rescheduled = client.patch(
        f"/api/seasons/{season.id}/matches/{match['id']}", json={"scheduled_at": "2026-03-15T18:00:00Z"}
    )
    assert rescheduled.status_code == 200
    assert rescheduled.json()["scheduled_at"].startswith("2026-03-15T18:00:00")
    assert rescheduled.json()["status"] == "Scheduled"

    voided = client.patch(f"/api/seasons/{season.id}/matches/{match['id']}", json={"status": "Voided"})
    assert voided.status_code == 200
    assert voided.json()["status"] == "Voided"
    assert voided.json()["scheduled_at"].startswith("2026-03-15T18:00:00")


def test_update_match_errors(client: TestClient, make_season):
    season = make_season(["A", "B"])
    other = make_season(["C", "D"])
    a, b = _roster(season)
    match = client.post(f"/api/seasons/{season.id}/matches", json={"round": 1, "team_a_id": a, "team_b_id": b}).json()

    assert client.patch(f"/api/seasons/{season.id}/matches/99999", json={"status": "Voided"}).status_code == 404
    assert client.patch(f"/api/seasons/{other.id}/matches/{match['id']}", json={}).status_code == 404
    assert client.patch(f"/api/seasons/{season.id}/matches/{match['id']}", json={"status": "Paused"}).status_code == 422
