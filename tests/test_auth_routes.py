"""Login, registration and account lookups."""

from marksheet.core.security import is_password_hash, verify_password
from tests.factories import PASSWORD, auth_header, make_user


def test_register_creates_hashed_account(client, db):
    res = client.post("/api/auth/register", json={
        "name": "Sarah Johnson",
        "email": "sarah.johnson@school.com",
        "password": "teacher123",
        "role": "teacher",
    })
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "User registered successfully"
    assert body["user"]["role"] == "teacher"
    assert "password" not in body["user"]

    stored = db.users.find_one({"email": "sarah.johnson@school.com"})
    assert is_password_hash(stored["password"])


def test_register_duplicate_email(client, admin):
    res = client.post("/api/auth/register", json={
        "name": "Someone",
        "email": "admin@school.com",
        "password": "whatever1",
        "role": "admin",
    })
    assert res.status_code == 400
    assert res.json()["detail"] == "User already exists"


def test_register_rejects_unknown_role_and_short_password(client):
    res = client.post("/api/auth/register", json={
        "name": "X", "email": "x@school.com", "password": "123", "role": "parent",
    })
    assert res.status_code == 422


def test_login_returns_token_and_user(client, admin):
    res = client.post("/api/auth/login", json={"email": "admin@school.com", "password": PASSWORD})
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Login successful"
    assert body["token"]
    assert body["user"]["email"] == "admin@school.com"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == str(admin["_id"])


def test_login_wrong_password(client, admin):
    res = client.post("/api/auth/login", json={"email": "admin@school.com", "password": "not-it-123"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid credentials"


def test_login_unknown_email(client):
    res = client.post("/api/auth/login", json={"email": "ghost@school.com", "password": PASSWORD})
    assert res.status_code == 401


def test_login_migrates_plaintext_password(client, db):
    make_user(db, "Legacy User", "legacy@school.com", "teacher", password="plain123", hashed=False)

    res = client.post("/api/auth/login", json={"email": "legacy@school.com", "password": "plain123"})
    assert res.status_code == 200

    stored = db.users.find_one({"email": "legacy@school.com"})["password"]
    assert is_password_hash(stored)
    assert verify_password("plain123", stored)

    # The migrated hash keeps working
    again = client.post("/api/auth/login", json={"email": "legacy@school.com", "password": "plain123"})
    assert again.status_code == 200


def test_wrong_plaintext_password_is_not_migrated(client, db):
    make_user(db, "Legacy User", "legacy@school.com", "teacher", password="plain123", hashed=False)
    res = client.post("/api/auth/login", json={"email": "legacy@school.com", "password": "plain999"})
    assert res.status_code == 401
    assert db.users.find_one({"email": "legacy@school.com"})["password"] == "plain123"


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401


def test_me_rejects_garbage_token(client):
    res = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 403
    assert res.json()["detail"] == "Invalid token"


def test_users_listing_is_admin_only(client, admin, teacher, admin_headers, teacher_headers):
    res = client.get("/api/auth/users", headers=admin_headers)
    assert res.status_code == 200
    emails = {u["email"] for u in res.json()}
    assert emails == {"admin@school.com", "john.smith@school.com"}

    assert client.get("/api/auth/users", headers=teacher_headers).status_code == 403


def test_token_survives_role_lookup(client, db):
    user = make_user(db, "Alice Brown", "alice.brown@student.com", "student")
    res = client.get("/api/auth/me", headers=auth_header(user))
    assert res.json()["role"] == "student"
