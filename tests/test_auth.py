"""Registration, login cookies and role checks."""
from common.security import hash_password, verify_password, create_token, decode_token
from modules.user.models import User

PASSWORD = "neon-password-123"


def test_register_and_login(client):
    resp = client.post("/auth/register", json={
        "email": "Rider@Neon.mx", "password": PASSWORD, "name": "Night Rider",
    })
    assert resp.status_code == 201
    assert resp.json()["email"] == "rider@neon.mx"
    assert resp.json()["role"] == "customer"

    login = client.post("/auth/login", json={"email": "rider@neon.mx", "password": PASSWORD})
    assert login.status_code == 200
    assert "auth_token" in login.cookies

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["name"] == "Night Rider"


def test_register_cannot_choose_role(client, db):
    client.post("/auth/register", json={
        "email": "sneaky@neon.mx", "password": PASSWORD, "name": "Sneaky", "role": "admin",
    })
    assert db.query(User).filter(User.email == "sneaky@neon.mx").one().role == "customer"


def test_duplicate_email_conflicts(client):
    payload = {"email": "rider@neon.mx", "password": PASSWORD, "name": "Night Rider"}
    assert client.post("/auth/register", json=payload).status_code == 201

    resp = client.post("/auth/register", json=payload)
    assert resp.status_code == 409
    assert resp.json()["kind"] == "conflict"


def test_register_validates_fields(client):
    resp = client.post("/auth/register", json={"email": "not-an-email", "password": "short", "name": "X"})

    assert resp.status_code == 400
    fields = {err["field"] for err in resp.json()["errors"]}
    assert {"email", "password", "name"} <= fields


def test_wrong_password_is_unauthorized(client, login):
    login()
    client.cookies.clear()

    resp = client.post("/auth/login", json={"email": "rider@neon.mx", "password": "wrong-password-1"})
    assert resp.status_code == 401


def test_me_without_login(client):
    assert client.get("/auth/me").status_code == 401


def test_logout_clears_auth(client, login):
    login()
    client.post("/auth/logout")
    assert client.get("/auth/me").status_code == 401


def test_password_hash_roundtrip():
    stored = hash_password("correct horse battery")
    assert stored.startswith("pbkdf2_sha256$")
    assert verify_password("correct horse battery", stored)
    assert not verify_password("wrong", stored)
    assert not verify_password("anything", "garbage")


def test_tampered_token_is_rejected():
    token = create_token({"sub": "1"})
    assert decode_token(token)["sub"] == "1"
    assert decode_token(token[:-2] + "xx") is None
