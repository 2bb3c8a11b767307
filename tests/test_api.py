"""
HTTP tests for the FastAPI application.
"""

import pytest
from fastapi.testclient import TestClient

from txbackend.crypt.passwords import PasswordHasher
from txbackend.database.helpers.transactionManagement import TransactionManagerRegistry
from txbackend.main import create_app


@pytest.fixture
def client(engine):
    app = create_app(engine, TransactionManagerRegistry(), PasswordHasher(rounds=4))
    with TestClient(app) as client:
        yield client


PASSWORD = "Secr3t!pass"


def register(client, username, display_name=None, email=None, **extra):
    payload = {
        "username": username,
        "password": PASSWORD,
        "email": email or f"{username}@example.com",
        "display_name": display_name or username.title(),
        **extra,
    }
    return client.post("/register", json=payload)


class TestRegisterEndpoint:

    def test_register(self, client):
        response = register(client, "alice", bio="hello")
        assert response.status_code == 201
        assert "user_id" in response.json()

    def test_conflict(self, client):
        assert register(client, "alice", display_name="Ally").status_code == 201

        response = register(client, "bob", display_name="Ally")

        assert response.status_code == 409
        assert client.get("/users/bob").status_code == 404

    def test_invalid_input(self, client):
        response = register(client, "alice", email="nope")
        assert response.status_code == 400
        assert "email" in response.json()["detail"]

    def test_weak_password(self, client):
        response = register(client, "alice", password="short")
        assert response.status_code == 400
        assert "password" in response.json()["detail"]

    def test_missing_field(self, client):
        response = client.post("/register", json={"username": "alice"})
        assert response.status_code == 422


class TestLoginEndpoint:

    def test_login(self, client):
        register(client, "alice", display_name="Alice A.")

        response = client.post("/login", json={"username": "alice", "password": PASSWORD})

        assert response.status_code == 200
        assert response.json()["profile"]["display_name"] == "Alice A."
        assert "password" not in response.json()

    def test_wrong_password(self, client):
        register(client, "alice")
        response = client.post("/login", json={"username": "alice", "password": "Wr0ng!pass"})
        assert response.status_code == 401

    def test_unknown_user(self, client):
        response = client.post("/login", json={"username": "ghost", "password": PASSWORD})
        assert response.status_code == 401


class TestUserEndpoints:

    def test_get_user_with_profile(self, client):
        user_id = register(client, "alice", display_name="Alice A.").json()["user_id"]

        response = client.get("/users/alice")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == user_id
        assert body["user_name"] == "alice"
        assert body["profile"]["display_name"] == "Alice A."

    def test_unknown_user(self, client):
        assert client.get("/users/ghost").status_code == 404

    def test_list_users(self, client):
        register(client, "alice")
        register(client, "bob", role="admin")

        response = client.get("/users")

        assert response.status_code == 200
        assert sorted(user["user_name"] for user in response.json()["users"]) == ["alice", "bob"]
