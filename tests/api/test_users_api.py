"""HTTP tests for the `/users` endpoints (in-memory repository)."""

import asyncio
import time

import httpx
import jwt
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from restful.api.deps import get_settings, get_user_repository
from tests.conftest import TEST_SECRET
from tests.fixtures.repositories import FailingUserRepository

BASE = "/api/users"


def _new_user(**overrides) -> dict:
    body = {
        "email": "anna@example.com",
        "names": "Anna Smith",
        "telephone": "+250788000001",
        "password": "s3cret!",
    }
    body.update(overrides)
    return body


def _create(client, **overrides):
    return client.post(BASE, json=_new_user(**overrides))


class TestCreateUser:
    def test_create_returns_201_with_token_and_new_id(self, client, repo, tokens):
        res = _create(client)

        assert res.status_code == 201
        body = res.json()
        assert body["message"] == "User created successfully"
        user = body["data"]["user"]
        assert ObjectId.is_valid(user["id"])
        assert user["id"] in repo.docs
        assert user["email"] == "anna@example.com"
        assert user["profile_picture"] == ""
        token = body["data"]["token"]
        assert token
        assert tokens.verify_access_token(token)["sub"] == user["id"]

    def test_password_is_hashed_and_never_returned(self, client, repo):
        res = _create(client)

        user = res.json()["data"]["user"]
        assert "password" not in user
        assert "password_hash" not in user
        stored = repo.docs[user["id"]]
        assert stored["password_hash"] != "s3cret!"
        assert stored["password_hash"].startswith("$argon2id$")

    def test_duplicate_email_returns_400_and_creates_nothing(self, client, repo):
        _create(client)

        res = _create(client, telephone="+250788000999")

        assert res.status_code == 400
        assert res.json()["message"] == "Email (anna@example.com) already exists"
        assert "data" not in res.json()
        assert len(repo.docs) == 1

    def test_duplicate_telephone_returns_400(self, client):
        _create(client)

        res = _create(client, email="other@example.com")

        assert res.status_code == 400
        assert res.json()["message"] == "Telephone (+250788000001) already exists"

    def test_email_is_lowercased(self, client):
        res = _create(client, email="Anna@Example.COM")

        assert res.json()["data"]["user"]["email"] == "anna@example.com"

    def test_duplicate_mixed_case_email_echoes_submitted_value(self, client, repo):
        _create(client, email="Anna@Example.com")

        res = _create(client, email="Anna@Example.com", telephone="+250788000999")

        assert res.status_code == 400
        assert res.json()["message"] == "Email (Anna@Example.com) already exists"
        assert len(repo.docs) == 1

    def test_case_variant_of_stored_email_is_duplicate(self, client):
        _create(client)

        res = _create(client, email="ANNA@example.com", telephone="+250788000999")

        assert res.status_code == 400
        assert res.json()["message"] == "Email (ANNA@example.com) already exists"

    def test_invalid_body_is_422(self, client):
        res = client.post(BASE, json={"email": "not-an-email", "names": "x"})

        assert res.status_code == 422
        assert res.json()["message"] == "Validation error"

    def test_unexpected_failure_is_generic_500_without_details(self, app, client):
        app.dependency_overrides[get_user_repository] = lambda: FailingUserRepository(RuntimeError("db down: secret-host"))

        res = _create(client)

        assert res.status_code == 500
        assert res.json() == {"message": "Error occurred"}

    @pytest.mark.asyncio
    async def test_concurrent_creates_with_same_email(self, app, repo):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            first, second = await asyncio.gather(
                ac.post(BASE, json=_new_user(telephone="+1")),
                ac.post(BASE, json=_new_user(telephone="+2")),
            )

        assert sorted([first.status_code, second.status_code]) == [201, 400]
        loser = first if first.status_code == 400 else second
        assert "Email" in loser.json()["message"]
        assert len(repo.docs) == 1


class TestAuthenticatedRoutes:
    def test_missing_token_is_401(self, client):
        res = client.get(f"{BASE}/me")

        assert res.status_code == 401
        assert res.json()["message"] == "Missing token"

    def test_invalid_token_is_401(self, client):
        res = client.get(f"{BASE}/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert res.status_code == 401
        assert res.json()["message"] == "Invalid token"

    def test_token_without_subject_is_401(self, client):
        token = jwt.encode({"exp": int(time.time()) + 60}, TEST_SECRET, algorithm="HS256")

        res = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 401

    def test_me_returns_own_user(self, client):
        created = _create(client).json()["data"]
        headers = {"Authorization": f"Bearer {created['token']}"}

        res = client.get(f"{BASE}/me", headers=headers)

        assert res.status_code == 200
        assert res.json()["message"] == "User retrieved successfully"
        assert res.json()["data"]["user"]["id"] == created["user"]["id"]

    def test_me_for_missing_user_returns_null(self, client, auth_header):
        res = client.get(f"{BASE}/me", headers=auth_header(str(ObjectId())))

        assert res.status_code == 200
        assert res.json()["data"] == {"user": None}

    def test_update_user(self, client, auth_header):
        user = _create(client).json()["data"]["user"]

        res = client.put(
            f"{BASE}/me",
            json={"email": "anna.new@example.com", "names": "Anna New", "telephone": "+250788000002"},
            headers=auth_header(user["id"]),
        )

        assert res.status_code == 200
        assert res.json()["message"] == "User updated successfully"
        updated = res.json()["data"]["user"]
        assert updated["email"] == "anna.new@example.com"
        assert updated["names"] == "Anna New"
        assert updated["telephone"] == "+250788000002"

    def test_update_user_partial_keeps_other_fields(self, client, auth_header):
        user = _create(client).json()["data"]["user"]

        res = client.put(f"{BASE}/me", json={"names": "Anna Renamed"}, headers=auth_header(user["id"]))

        updated = res.json()["data"]["user"]
        assert updated["names"] == "Anna Renamed"
        assert updated["email"] == user["email"]

    def test_update_user_to_taken_email_is_400(self, client, auth_header):
        _create(client)
        other = _create(client, email="bob@example.com", telephone="+250788000003").json()["data"]["user"]

        res = client.put(f"{BASE}/me", json={"email": "anna@example.com"}, headers=auth_header(other["id"]))

        assert res.status_code == 400
        assert res.json()["message"] == "Email (anna@example.com) already exists"

    def test_update_missing_user_is_404(self, client, auth_header):
        res = client.put(f"{BASE}/me", json={"names": "Ghost"}, headers=auth_header(str(ObjectId())))

        assert res.status_code == 404
        assert res.json()["message"] == "User not found"

    def test_delete_user_then_get_by_id_returns_null(self, client, auth_header):
        user = _create(client).json()["data"]["user"]

        res = client.delete(f"{BASE}/me", headers=auth_header(user["id"]))
        assert res.status_code == 200
        assert res.json()["message"] == "User deleted successfully"
        assert res.json()["data"]["user"]["id"] == user["id"]

        res = client.get(f"{BASE}/{user['id']}")
        assert res.status_code == 200
        assert res.json()["data"]["user"] is None

    def test_delete_user_twice_is_404(self, client, auth_header):
        user = _create(client).json()["data"]["user"]
        client.delete(f"{BASE}/me", headers=auth_header(user["id"]))

        res = client.delete(f"{BASE}/me", headers=auth_header(user["id"]))

        assert res.status_code == 404

    def test_update_then_remove_avatar(self, client, auth_header):
        user = _create(client).json()["data"]["user"]
        headers = auth_header(user["id"])

        res = client.patch(f"{BASE}/me/avatar", json={"url": "https://cdn.example.com/a.png"}, headers=headers)
        assert res.status_code == 200
        assert res.json()["message"] == "Avatar updated successfully"
        assert res.json()["data"]["user"]["profile_picture"] == "https://cdn.example.com/a.png"

        res = client.patch(f"{BASE}/me/avatar/remove", headers=headers)
        assert res.status_code == 200
        assert res.json()["message"] == "Avatar removed successfully"
        assert res.json()["data"]["user"]["profile_picture"] == ""


class TestWithoutSigningSecret:
    @pytest.fixture(name="unsigned_client")
    def unsigned_client_fixture(self, app, settings, repo):
        unsigned = settings.model_copy(update={"jwt_secret": None})
        app.dependency_overrides[get_settings] = lambda: unsigned
        return TestClient(app)

    def test_public_routes_still_work(self, unsigned_client, repo):
        repo.docs["65a1b2c3d4e5f6a7b8c9d0e1"] = {
            "id": "65a1b2c3d4e5f6a7b8c9d0e1",
            "email": "anna@example.com",
            "names": "Anna",
            "telephone": "+1",
            "password_hash": "h",
            "profile_picture": "",
        }

        assert unsigned_client.get(BASE).status_code == 200
        assert unsigned_client.get(f"{BASE}/65a1b2c3d4e5f6a7b8c9d0e1").json()["data"]["user"]["names"] == "Anna"
        assert unsigned_client.get(f"{BASE}/search/ann").json()["data"]["users"][0]["names"] == "Anna"
        assert unsigned_client.delete(f"{BASE}/65a1b2c3d4e5f6a7b8c9d0e1").status_code == 200
        assert repo.docs == {}

    def test_create_fails_without_storing_a_user(self, unsigned_client, repo):
        res = unsigned_client.post(BASE, json=_new_user())

        assert res.status_code == 500
        assert res.json() == {"message": "Error occurred"}
        assert repo.docs == {}


class TestPublicRoutes:
    def test_all_lists_every_user(self, client):
        _create(client)
        _create(client, email="bob@example.com", telephone="+250788000003", names="Bob")

        res = client.get(BASE)

        assert res.status_code == 200
        assert res.json()["message"] == "Users retrieved successfully"
        assert {u["names"] for u in res.json()["data"]["users"]} == {"Anna Smith", "Bob"}

    def test_all_on_empty_store(self, client):
        res = client.get(BASE)

        assert res.json()["data"] == {"users": []}

    def test_get_by_id(self, client):
        user = _create(client).json()["data"]["user"]

        res = client.get(f"{BASE}/{user['id']}")

        assert res.status_code == 200
        assert res.json()["data"]["user"]["email"] == "anna@example.com"

    def test_get_by_malformed_id_is_400(self, client):
        res = client.get(f"{BASE}/not-an-id")

        assert res.status_code == 400
        assert res.json()["message"] == "Invalid user id"

    def test_search_is_case_insensitive_substring(self, client):
        _create(client, names="Anna")
        _create(client, email="annalise@example.com", telephone="+2", names="ANNALISE")
        _create(client, email="bob@example.com", telephone="+3", names="Bob")

        res = client.get(f"{BASE}/search/ann")

        assert res.status_code == 200
        assert sorted(u["names"] for u in res.json()["data"]["users"]) == ["ANNALISE", "Anna"]

    def test_search_without_matches_is_empty_200(self, client):
        _create(client)

        res = client.get(f"{BASE}/search/zzz")

        assert res.status_code == 200
        assert res.json()["data"] == {"users": []}

    def test_search_treats_query_literally(self, client):
        _create(client, names="Anna")

        res = client.get(f"{BASE}/search/.*")

        assert res.json()["data"]["users"] == []

    def test_delete_by_id(self, client):
        user = _create(client).json()["data"]["user"]

        res = client.delete(f"{BASE}/{user['id']}")

        assert res.status_code == 200
        assert res.json()["data"]["user"]["id"] == user["id"]
        assert client.get(f"{BASE}/{user['id']}").json()["data"]["user"] is None

    def test_delete_by_unknown_id_is_404(self, client):
        res = client.delete(f"{BASE}/{ObjectId()}")

        assert res.status_code == 404
        assert res.json() == {"message": "User not found"}

    def test_request_id_is_echoed(self, client):
        res = client.get(BASE, headers={"X-Request-Id": "abc123"})

        assert res.headers["X-Request-Id"] == "abc123"
