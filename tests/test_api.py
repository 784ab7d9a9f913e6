"""Tests for the HTTP API."""
import logging
from datetime import datetime, timedelta, timezone

import pytest


def future(days: int = 30) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def tournament_payload(**overrides):
    data = {
        "name": "Spring Cup",
        "game": "Rocket League",
        "format": "SOLO",
        "max_participants": 2,
        "prize_pool": 250.5,
        "start_date": future(),
    }
    data.update(overrides)
    return data


async def open_tournament(client, headers, **overrides):
    r = await client.post("/api/tournaments", json=tournament_payload(**overrides), headers=headers)
    assert r.status_code == 200, r.text
    tid = r.json()["id"]
    r = await client.patch(f"/api/tournaments/{tid}/status", json={"status": "OPEN"}, headers=headers)
    assert r.status_code == 200, r.text
    return tid


@pytest.mark.asyncio
async def test_health(client):
    """Health endpoint returns ok."""
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_list_tournaments_empty(client):
    r = await client.get("/api/tournaments")
    assert r.status_code == 200
    assert r.json() == []


@pytest.mark.asyncio
async def test_login_bootstraps_admin(client, auth_headers):
    r = await client.get("/api/auth/me", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["role"] == "ADMIN"
    assert r.json()["username"] == "admin"


@pytest.mark.asyncio
async def test_login_wrong_password(client, register_user):
    await register_user("alice")
    r = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Wrong1234"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_x_auth_token_header(client, register_user):
    _, headers = await register_user("alice")
    token = headers["Authorization"].split(" ", 1)[1]
    r = await client.get("/api/auth/me", headers={"X-Auth-Token": token})
    assert r.status_code == 200
    assert r.json()["username"] == "alice"


@pytest.mark.asyncio
async def test_register_rejects_admin_role(client):
    r = await client.post(
        "/api/auth/register",
        json={"username": "mallory", "email": "mallory@example.com", "password": "Secret123", "role": "ADMIN"},
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_register_duplicate_is_conflict(client, register_user):
    await register_user("alice")
    r = await client.post(
        "/api/auth/register",
        json={"username": "alice", "email": "alice2@example.com", "password": "Secret123"},
    )
    assert r.status_code == 409
    assert r.json() == {"success": False, "error": "Username is already taken", "category": "conflict"}


@pytest.mark.asyncio
async def test_register_weak_password(client):
    r = await client.post(
        "/api/auth/register",
        json={"username": "bob", "email": "bob@example.com", "password": "password"},
    )
    assert r.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, path",
    [
        ("post", "/api/tournaments"),
        ("patch", "/api/tournaments/1/status"),
        ("post", "/api/tournaments/1/register"),
        ("post", "/api/teams"),
        ("get", "/api/users"),
        ("get", "/api/auth/me"),
    ],
)
async def test_auth_required(client, method, path):
    kwargs = {} if method == "get" else {"json": {}}
    r = await getattr(client, method)(path, **kwargs)
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_player_cannot_create_tournament(client, register_user):
    _, headers = await register_user("alice")
    r = await client.post("/api/tournaments", json=tournament_payload(), headers=headers)
    assert r.status_code == 403
    assert r.json()["category"] == "forbidden"


@pytest.mark.asyncio
async def test_create_and_get_tournament(client, register_user):
    orga, headers = await register_user("orga", role="ORGANIZER")
    r = await client.post("/api/tournaments", json=tournament_payload(), headers=headers)
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "DRAFT"
    assert data["organizer_id"] == orga["id"]
    assert data["prize_pool"] == 250.5

    r = await client.get(f"/api/tournaments/{data['id']}")
    assert r.status_code == 200
    assert r.json()["name"] == "Spring Cup"


@pytest.mark.asyncio
async def test_missing_tournament_is_404(client):
    r = await client.get("/api/tournaments/999")
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Tournament not found", "category": "not_found"}


@pytest.mark.asyncio
async def test_past_start_date_is_400(client, auth_headers):
    past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    r = await client.post("/api/tournaments", json=tournament_payload(start_date=past), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["category"] == "validation_failed"


@pytest.mark.asyncio
async def test_unknown_status_is_400(client, auth_headers):
    tid = await open_tournament(client, auth_headers)
    r = await client.patch(f"/api/tournaments/{tid}/status", json={"status": "PAUSED"}, headers=auth_headers)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_illegal_transition_is_422(client, auth_headers):
    r = await client.post("/api/tournaments", json=tournament_payload(), headers=auth_headers)
    tid = r.json()["id"]
    r = await client.patch(f"/api/tournaments/{tid}/status", json={"status": "COMPLETED"}, headers=auth_headers)
    assert r.status_code == 422
    assert r.json()["category"] == "rule_violation"


@pytest.mark.asyncio
async def test_list_filters(client, auth_headers):
    await open_tournament(client, auth_headers, game="Chess")
    await client.post("/api/tournaments", json=tournament_payload(game="Chess"), headers=auth_headers)
    await client.post("/api/tournaments", json=tournament_payload(game="Go"), headers=auth_headers)

    r = await client.get("/api/tournaments", params={"game": "Chess", "status": "OPEN"})
    assert r.status_code == 200
    assert len(r.json()) == 1

    r = await client.get("/api/tournaments", params={"limit": 2, "page": 2})
    assert len(r.json()) == 1

    r = await client.get("/api/tournaments", params={"limit": 500})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_solo_registration_flow(client, auth_headers, register_user):
    tid = await open_tournament(client, auth_headers)
    players = [await register_user(name) for name in ("alice", "bob", "carol")]

    reg_ids = []
    for user, headers in players:
        r = await client.post(f"/api/tournaments/{tid}/register", json={"player_id": user["id"]}, headers=headers)
        assert r.status_code == 200, r.text
        assert r.json()["status"] == "PENDING"
        reg_ids.append(r.json()["id"])

    alice, alice_headers = players[0]
    r = await client.post(f"/api/tournaments/{tid}/register", json={"player_id": alice["id"]}, headers=alice_headers)
    assert r.status_code == 409

    r = await client.patch(
        f"/api/tournaments/{tid}/registrations/{reg_ids[0]}/status",
        json={"status": "CONFIRMED"},
        headers=alice_headers,
    )
    assert r.status_code == 403

    for reg_id in reg_ids[:2]:
        r = await client.patch(
            f"/api/tournaments/{tid}/registrations/{reg_id}/status",
            json={"status": "CONFIRMED"},
            headers=auth_headers,
        )
        assert r.status_code == 200
        assert r.json()["confirmed_at"] is not None

    r = await client.patch(
        f"/api/tournaments/{tid}/registrations/{reg_ids[2]}/status",
        json={"status": "CONFIRMED"},
        headers=auth_headers,
    )
    assert r.status_code == 422
    assert r.json()["error"] == "Maximum number of participants reached"

    r = await client.delete(f"/api/tournaments/{tid}/registrations/{reg_ids[0]}", headers=auth_headers)
    assert r.status_code == 422

    r = await client.delete(f"/api/tournaments/{tid}/registrations/{reg_ids[2]}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"ok": True}

    r = await client.get(f"/api/tournaments/{tid}/registrations")
    assert [reg["status"] for reg in r.json()] == ["CONFIRMED", "CONFIRMED"]

    r = await client.patch(f"/api/tournaments/{tid}/status", json={"status": "ONGOING"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "ONGOING"

    r = await client.delete(f"/api/tournaments/{tid}", headers=auth_headers)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_team_registration_flow(client, auth_headers, register_user):
    tid = await open_tournament(client, auth_headers, format="TEAM", max_participants=4)
    captain, captain_headers = await register_user("captain")
    _, other_headers = await register_user("other")

    r = await client.post("/api/teams", json={"name": "Night Owls", "tag": "OWL"}, headers=captain_headers)
    assert r.status_code == 200
    team = r.json()
    assert team["captain_id"] == captain["id"]

    r = await client.post("/api/teams", json={"name": "Night Owls", "tag": "NOWL"}, headers=other_headers)
    assert r.status_code == 409

    r = await client.post(f"/api/tournaments/{tid}/register", json={"team_id": team["id"]}, headers=other_headers)
    assert r.status_code == 403

    r = await client.post(f"/api/tournaments/{tid}/register", json={"player_id": captain["id"]}, headers=captain_headers)
    assert r.status_code == 422

    r = await client.post(f"/api/tournaments/{tid}/register", json={"team_id": team["id"]}, headers=captain_headers)
    assert r.status_code == 200
    assert r.json()["team_id"] == team["id"]

    r = await client.delete(f"/api/teams/{team['id']}", headers=captain_headers)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_users_admin_only(client, auth_headers, register_user):
    alice, alice_headers = await register_user("alice")

    r = await client.get("/api/users", headers=alice_headers)
    assert r.status_code == 403

    r = await client.get("/api/users", headers=auth_headers)
    assert r.status_code == 200
    assert {u["username"] for u in r.json()} == {"admin", "alice"}

    me = (await client.get("/api/auth/me", headers=auth_headers)).json()
    r = await client.delete(f"/api/users/{me['id']}", headers=auth_headers)
    assert r.status_code == 422

    r = await client.delete(f"/api/users/{alice['id']}", headers=auth_headers)
    assert r.status_code == 200

    r = await client.get("/api/auth/me", headers=alice_headers)
    assert r.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"player_id": 0}, {"player_id": -3}, {"team_id": 0}])
async def test_register_rejects_non_positive_ids(client, register_user, auth_headers, body):
    tid = await open_tournament(client, auth_headers)
    _, headers = await register_user("alice")
    r = await client.post(f"/api/tournaments/{tid}/register", json=body, headers=headers)
    assert r.status_code == 422

    r = await client.get(f"/api/tournaments/{tid}/registrations")
    assert r.json() == []


@pytest.mark.asyncio
async def test_requests_are_access_logged(client, caplog):
    caplog.set_level(logging.INFO, logger="nexus.http")
    await client.get("/api/health")
    await client.get("/api/tournaments/999")
    messages = [r.getMessage() for r in caplog.records if r.name == "nexus.http"]
    assert any(m.startswith("GET /api/health - 200 (") for m in messages)
    assert any(m.startswith("GET /api/tournaments/999 - 404 (") for m in messages)
