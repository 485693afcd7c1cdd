"""
HTTP level tests: routes, status codes and the list/error envelopes
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from userservice.repositories.user import UserRepository


async def register(client, uid, email, nickname=None, gender="Male", date_of_birth="1992-04-10"):
    response = await client.post("/api/users/register", json={
        "uid": uid,
        "nickname": nickname or uid.lower(),
        "email": email,
        "gender": gender,
        "date_of_birth": date_of_birth,
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_friend_and_enemy_scenario(client, notifier):
    a = await register(client, "A1", "a@x.com")
    b = await register(client, "B1", "b@x.com")

    response = await client.post(f"/api/users/{a['id']}/friends/{b['id']}")
    assert response.status_code == 201
    assert response.json()["status"] == "ApplicationSent"
    notifier.notify_friend_request.assert_awaited_once()

    response = await client.patch(f"/api/users/{b['id']}/friends/{a['id']}/accept")
    assert response.status_code == 200
    assert response.json()["status"] == "Friend"

    for owner, other in ((a, b), (b, a)):
        response = await client.get(f"/api/users/{owner['id']}/friends/{other['id']}/exists")
        assert response.json() == {"exists": True}

    response = await client.post(f"/api/users/{a['id']}/enemies/{b['id']}")
    assert response.status_code == 201
    assert response.json()["enemy_id"] == b["id"]

    response = await client.get(f"/api/users/{a['id']}/friends/{b['id']}/exists?include_pending=true")
    assert response.json() == {"exists": False}
    response = await client.get(f"/api/users/{a['id']}/enemies/{b['id']}/exists")
    assert response.json() == {"exists": True}

    response = await client.post(f"/api/users/{b['id']}/friends/{a['id']}")
    assert response.status_code == 403
    assert response.json()["status"] == 403
    assert "enemy list" in response.json()["error"]


@pytest.mark.asyncio
async def test_list_envelope_and_request_lists(client):
    owner = await register(client, "OWN", "own@x.com")
    for n in range(3):
        other = await register(client, f"R{n}", f"r{n}@x.com")
        response = await client.post(f"/api/users/{other['id']}/friends/{owner['id']}")
        assert response.status_code == 201

    response = await client.get(f"/api/users/{owner['id']}/friends/requests/incoming", params={"limit": 2})
    body = response.json()
    assert response.status_code == 200
    assert body["offset"] == 0
    assert body["limit"] == 2
    assert body["total"] == 3
    assert len(body["data"]) == 2
    assert set(body["data"][0]) == {"id", "uid", "nickname", "avatar_url", "status"}

    response = await client.get(f"/api/users/{owner['id']}/friends/requests/outgoing")
    assert response.json()["total"] == 0
    assert response.json()["limit"] == 10

    response = await client.get(f"/api/users/{owner['id']}/friends")
    assert response.json() == {"data": [], "offset": 0, "limit": 10, "total": 0}


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["limit=21", "offset=-1", "limit=0"])
async def test_bad_pagination_is_400(client, query):
    user = await register(client, "P1", "p@x.com")

    response = await client.get(f"/api/users/{user['id']}/enemies?{query}")

    assert response.status_code == 400
    assert response.json()["status"] == 400


@pytest.mark.asyncio
async def test_reject_and_unfriend_missing_are_404(client):
    a = await register(client, "A1", "a@x.com")
    b = await register(client, "B1", "b@x.com")

    response = await client.patch(f"/api/users/{b['id']}/friends/{a['id']}/reject")
    assert response.status_code == 404
    assert response.json() == {"error": "Friend request does not exist", "status": 404}

    response = await client.delete(f"/api/users/{a['id']}/friends/{b['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reject_and_unfriend(client):
    a = await register(client, "A1", "a@x.com")
    b = await register(client, "B1", "b@x.com")
    await client.post(f"/api/users/{a['id']}/friends/{b['id']}")

    response = await client.patch(f"/api/users/{b['id']}/friends/{a['id']}/reject")
    assert response.status_code == 204

    await client.post(f"/api/users/{a['id']}/friends/{b['id']}")
    await client.patch(f"/api/users/{b['id']}/friends/{a['id']}/accept")
    response = await client.delete(f"/api/users/{a['id']}/friends/{b['id']}")
    assert response.status_code == 204

    response = await client.get(f"/api/users/{b['id']}/friends")
    assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_self_friend_request_is_400(client):
    a = await register(client, "A1", "a@x.com")

    response = await client.post(f"/api/users/{a['id']}/friends/{a['id']}")

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_enemy_revoke_and_duplicate(client):
    a = await register(client, "A1", "a@x.com")
    b = await register(client, "B1", "b@x.com")

    assert (await client.post(f"/api/users/{a['id']}/enemies/{b['id']}")).status_code == 201
    assert (await client.post(f"/api/users/{a['id']}/enemies/{b['id']}")).status_code == 409

    response = await client.get(f"/api/users/{a['id']}/enemies")
    assert response.json()["total"] == 1
    assert response.json()["data"][0]["id"] == b["id"]

    assert (await client.delete(f"/api/users/{a['id']}/enemies/{b['id']}")).status_code == 204
    assert (await client.delete(f"/api/users/{a['id']}/enemies/{b['id']}")).status_code == 404


class TestUsersApi:

    @pytest.mark.asyncio
    async def test_register_get_and_short(self, client):
        user = await register(client, "A1", "a@x.com", nickname="Alice", gender="Female")

        assert user["status"] == "Online"
        assert user["avatar_url"] == ""

        response = await client.get(f"/api/users/{user['id']}")
        assert response.status_code == 200
        assert response.json()["email"] == "a@x.com"

        response = await client.get(f"/api/users/{user['id']}/main")
        assert response.json() == {
            "id": user["id"],
            "uid": "A1",
            "nickname": "Alice",
            "avatar_url": "",
            "status": "Online",
        }

    @pytest.mark.asyncio
    async def test_register_conflict(self, client):
        await register(client, "A1", "a@x.com")

        response = await client.post("/api/users/register", json={
            "uid": "A1", "nickname": "dup", "email": "dup@x.com",
            "gender": "Male", "date_of_birth": "1990-01-01",
        })

        assert response.status_code == 409
        assert response.json()["status"] == 409

    @pytest.mark.asyncio
    async def test_register_bad_enum_and_long_uid_are_400(self, client):
        response = await client.post("/api/users/register", json={
            "uid": "A1", "nickname": "a", "email": "a@x.com",
            "gender": "Unknown", "date_of_birth": "1990-01-01",
        })
        assert response.status_code == 400
        assert response.json()["status"] == 400

        response = await client.post("/api/users/register", json={
            "uid": "ABCDEFGHIJK", "nickname": "a", "email": "a@x.com",
            "gender": "Male", "date_of_birth": "1990-01-01",
        })
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_register_future_birth_date(self, client):
        response = await client.post("/api/users/register", json={
            "uid": "A1", "nickname": "a", "email": "a@x.com",
            "gender": "Male", "date_of_birth": "2999-01-01",
        })
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_patch_partial(self, client):
        user = await register(client, "A1", "a@x.com", nickname="Alice")

        response = await client.patch(f"/api/users/{user['id']}", json={
            "avatar_url": "https://cdn.x.com/a.png",
            "status": "DoNotDisturb",
            "nickname": None,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["avatar_url"] == "https://cdn.x.com/a.png"
        assert body["status"] == "DoNotDisturb"
        assert body["nickname"] == "Alice"

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, client):
        response = await client.get(f"/api/users/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json() == {"error": "User does not exist", "status": 404}

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, client):
        response = await client.get("/api/users/not-a-uuid")

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_list_and_search(self, client):
        await register(client, "A1", "a@x.com", nickname="Alexander")
        await register(client, "B1", "b@x.com", nickname="Bob")

        response = await client.get("/api/users")
        assert response.json()["total"] == 2
        assert "email" in response.json()["data"][0]

        response = await client.get("/api/users/main", params={"limit": 1})
        assert response.json()["total"] == 2
        assert len(response.json()["data"]) == 1
        assert "email" not in response.json()["data"][0]

        response = await client.get("/api/users/search-api", params={"uid": "B1"})
        assert response.json()["nickname"] == "Bob"

        response = await client.get("/api/users/search-api", params={"nickname": "alex"})
        assert response.json()["total"] == 1
        assert response.json()["data"][0]["uid"] == "A1"

        response = await client.get("/api/users/search-api", params={"uid": "ZZ"})
        assert response.status_code == 404

        response = await client.get("/api/users/search-api")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_cascades(self, client):
        a = await register(client, "A1", "a@x.com")
        b = await register(client, "B1", "b@x.com")
        await client.post(f"/api/users/{a['id']}/friends/{b['id']}")
        await client.post(f"/api/users/{b['id']}/enemies/{a['id']}")

        response = await client.delete(f"/api/users/{a['id']}")
        assert response.status_code == 204

        assert (await client.get(f"/api/users/{a['id']}")).status_code == 404
        assert (await client.get(f"/api/users/{b['id']}/enemies")).json()["total"] == 0
        assert (await client.get(f"/api/users/{b['id']}/friends/requests/incoming")).json()["total"] == 0


@pytest.mark.asyncio
async def test_storage_failure_is_500_without_details(client):
    failure = OperationalError("SELECT * FROM users", {}, Exception("db down at 10.0.0.5"))

    with patch.object(UserRepository, "get_all", AsyncMock(side_effect=failure)):
        response = await client.get("/api/users")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "status": 500}
    assert "10.0.0.5" not in response.text
