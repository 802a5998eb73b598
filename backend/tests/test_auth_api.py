from app.auth.password import password_manager
from app.models import User, UserSession


def test_register_then_me(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "New@Example.com", "password": "hunter22", "fullName": "New Person"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "new@example.com"
    assert body["user"]["role"] == "user"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["user"]["fullName"] == "New Person"


def test_register_duplicate_email_is_400(client, regular_user):
    response = client.post(
        "/api/auth/register",
        json={"email": "user@example.com", "password": "hunter22", "fullName": "Dup"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Email already registered"


def test_register_race_on_same_email_is_400(client, db, monkeypatch):
    real_hash = password_manager.hash_password

    def hash_after_competing_signup(password):
        # Another request commits the same email between the lookup and our insert
        db.add(User(email="race@example.com", hashed_password=real_hash(password), full_name="First"))
        db.commit()
        return real_hash(password)

    monkeypatch.setattr(password_manager, "hash_password", hash_after_competing_signup)

    response = client.post(
        "/api/auth/register",
        json={"email": "race@example.com", "password": "hunter22", "fullName": "Second"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Email already registered"
    assert db.query(User).filter(User.email == "race@example.com").count() == 1


def test_register_short_password_is_400(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "a@example.com", "password": "123", "fullName": "Short"},
    )

    assert response.status_code == 400


def test_login_success(client, regular_user, db):
    response = client.post("/api/auth/login", json={"email": "user@example.com", "password": "secret123"})

    assert response.status_code == 200
    assert response.json()["token"]
    assert response.json()["user"]["id"] == regular_user.id
    assert db.query(UserSession).filter(UserSession.user_id == regular_user.id).count() == 1


def test_login_wrong_password_is_401(client, regular_user):
    response = client.post("/api/auth/login", json={"email": "user@example.com", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


def test_login_unknown_user_is_401(client):
    response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})

    assert response.status_code == 401


def test_me_without_token_is_401(client):
    assert client.get("/api/auth/me").status_code == 401


def test_logout_revokes_token(client, user_headers):
    assert client.get("/api/auth/me", headers=user_headers).status_code == 200

    assert client.post("/api/auth/logout", headers=user_headers).status_code == 200

    assert client.get("/api/auth/me", headers=user_headers).status_code == 403


def test_logout_keeps_other_sessions(client, regular_user):
    credentials = {"email": "user@example.com", "password": "secret123"}
    first = client.post("/api/auth/login", json=credentials).json()["token"]
    second = client.post("/api/auth/login", json=credentials).json()["token"]

    client.post("/api/auth/logout", headers={"Authorization": f"Bearer {first}"})

    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {first}"}).status_code == 403
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {second}"}).status_code == 200
