from datetime import timedelta

from conftest import auth_header

from coursegrade.core.security import create_access_token, decode_access_token


def test_register_and_login(client):
    r = client.post(
        "/auth/register",
        json={"email": "new@example.com", "password": "longenough", "full_name": "New Student"},
    )
    assert r.status_code == 201, r.text
    assert r.json()["role"] == "student"

    r = client.post("/auth/register", json={"email": "new@example.com", "password": "longenough"})
    assert r.status_code == 400

    r = client.post("/auth/login", json={"email": "new@example.com", "password": "longenough"})
    assert r.status_code == 200
    token = r.json()["access_token"]

    r = client.get("/auth/me", headers=auth_header(token))
    assert r.status_code == 200
    assert r.json()["email"] == "new@example.com"


def test_wrong_password(client):
    r = client.post("/auth/login", json={"email": "student1@example.com", "password": "nope"})
    assert r.status_code == 401


def test_short_password_rejected(client):
    r = client.post("/auth/register", json={"email": "short@example.com", "password": "123"})
    assert r.status_code == 422


def test_invalid_and_expired_tokens(client, seed):
    r = client.get("/auth/me", headers=auth_header("not-a-token"))
    assert r.status_code == 401

    expired = create_access_token({"sub": str(seed["student1"])}, timedelta(minutes=-1))
    assert decode_access_token(expired) is None
    r = client.get("/auth/me", headers=auth_header(expired))
    assert r.status_code == 401

    ghost = create_access_token({"sub": "999999"}, timedelta(minutes=5))
    r = client.get("/auth/me", headers=auth_header(ghost))
    assert r.status_code == 401


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
