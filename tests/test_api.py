"""API endpoint tests."""

import csv
from io import StringIO

from postboard.models.user import User


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_user(client, db):
    """Test creating a user without a password."""
    response = client.post(
        "/api/v1/users", json={"username": "alice", "email": "alice@x.com"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["username"] == "alice"
    assert data["is_admin"] is False
    assert data["notification_preferences"] == {
        "email_enabled": True,
        "slack_enabled": False,
        "slack_webhook_url": None,
    }
    assert "password_hash" not in data
    assert "password_reset_token" not in data

    user = db.query(User).filter(User.id == data["id"]).one()
    assert user.password_hash is None
    assert user.password_reset_token is not None


def test_create_user_sends_setup_email(client, outbox, db):
    """Test that a setup email carrying the reset token is dispatched."""
    response = client.post("/api/v1/users", json={"username": "bob", "email": "bob@example.com"})
    assert response.status_code == 201

    token = db.query(User).filter(User.username == "bob").one().password_reset_token
    assert outbox.sent == [("bob@example.com", "bob", token)]


def test_create_user_reports_every_violation(client):
    """Test that validation errors are listed for every broken field."""
    response = client.post("/api/v1/users", json={"username": "", "email": "not-an-email"})
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert {e["field"] for e in errors} == {"username", "email"}
    assert "Username is required" in [e["message"] for e in errors]


def test_create_user_duplicate_username(client):
    """Test that usernames must be unique."""
    client.post("/api/v1/users", json={"username": "carol", "email": "carol@example.com"})
    response = client.post(
        "/api/v1/users", json={"username": "carol", "email": "other@example.com"}
    )
    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "username", "message": "Username is already taken"}
    ]


def test_get_users(client, auth_headers):
    """Test listing users."""
    client.post("/api/v1/users", json={"username": "dave", "email": "dave@example.com"})
    client.post("/api/v1/users", json={"username": "erin", "email": "erin@example.com"})

    response = client.get("/api/v1/users", headers=auth_headers)
    assert response.status_code == 200
    assert [u["username"] for u in response.json()] == ["testuser", "dave", "erin"]


def test_user_reads_require_authentication(client):
    """Test that listing and fetching users need a bearer token."""
    user_id = client.post(
        "/api/v1/users", json={"username": "dave", "email": "dave@example.com"}
    ).json()["id"]

    assert client.get("/api/v1/users").status_code in (401, 403)
    assert client.get(f"/api/v1/users/{user_id}").status_code in (401, 403)


def test_get_user_not_found(client, auth_headers):
    """Test fetching a missing user."""
    response = client.get("/api/v1/users/9999", headers=auth_headers)
    assert response.status_code == 404


def test_update_user(client, register):
    """Test updating email and notification preferences."""
    headers = register("frank", "frank@example.com")

    response = client.put(
        f"/api/v1/users/{headers.user_id}",
        headers=headers,
        json={
            "email": "frank@newmail.com",
            "notification_preferences": {
                "email_enabled": False,
                "slack_enabled": True,
                "slack_webhook_url": "https://hooks.slack.com/services/T000/B000/XXX",
            },
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "frank@newmail.com"
    assert data["notification_preferences"]["slack_enabled"] is True
    assert data["notification_preferences"]["email_enabled"] is False


def test_update_user_not_found(client, admin_headers):
    """Test updating a missing user."""
    response = client.put(
        "/api/v1/users/9999", headers=admin_headers, json={"email": "ghost@example.com"}
    )
    assert response.status_code == 404


def test_update_user_invalid_email(client, register):
    """Test that updates validate the email."""
    headers = register("gina", "gina@example.com")

    response = client.put(
        f"/api/v1/users/{headers.user_id}", headers=headers, json={"email": "broken"}
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "email"


def test_update_user_requires_authentication(client, db, auth_headers):
    """Test that anonymous callers cannot change an account."""
    response = client.put(
        f"/api/v1/users/{auth_headers.user_id}", json={"email": "attacker@evil.com"}
    )
    assert response.status_code in (401, 403)

    user = db.query(User).filter(User.id == auth_headers.user_id).one()
    db.refresh(user)
    assert user.email == auth_headers.email


def test_update_other_user_hidden(client, db, outbox, auth_headers, register):
    """Test that another user's account cannot be redirected to a new email."""
    intruder = register("mallory", "mallory@example.com")

    response = client.put(
        f"/api/v1/users/{auth_headers.user_id}",
        headers=intruder,
        json={"email": "attacker@evil.com"},
    )
    assert response.status_code == 404

    user = db.query(User).filter(User.id == auth_headers.user_id).one()
    db.refresh(user)
    assert user.email == auth_headers.email

    # No account carries the injected address, so no reset email goes out
    outbox.sent.clear()
    client.post("/api/v1/auth/forgot-password", json={"email": "attacker@evil.com"})
    assert outbox.sent == []


def test_admin_updates_other_user(client, auth_headers, admin_headers):
    """Test that administrators can edit any account."""
    response = client.put(
        f"/api/v1/users/{auth_headers.user_id}",
        headers=admin_headers,
        json={"email": "moved@example.com"},
    )
    assert response.status_code == 200
    assert response.json()["email"] == "moved@example.com"


def test_user_cannot_take_admin_email(client, auth_headers):
    """Test that a regular user cannot move into the administrator domain."""
    response = client.put(
        f"/api/v1/users/{auth_headers.user_id}",
        headers=auth_headers,
        json={"email": "testuser@admin.com"},
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "email"

    response = client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.json()["is_admin"] is False


def test_admin_role_follows_current_email(client, auth_headers, admin_headers):
    """Test that an admin token stops granting admin once the email leaves the domain."""
    response = client.put(
        f"/api/v1/users/{admin_headers.user_id}",
        headers=admin_headers,
        json={"email": "boss@example.com"},
    )
    assert response.status_code == 200

    response = client.delete(f"/api/v1/users/{auth_headers.user_id}", headers=admin_headers)
    assert response.status_code == 403
    response = client.get("/api/v1/users/export", headers=admin_headers)
    assert response.status_code == 403


def test_set_password_and_login(client, db):
    """Test the full setup flow: create, set password, log in."""
    user_id = client.post(
        "/api/v1/users", json={"username": "alice", "email": "alice@x.com"}
    ).json()["id"]
    token = db.query(User).filter(User.id == user_id).one().password_reset_token

    response = client.post(
        "/api/v1/auth/set-password",
        json={"token": token, "password": "Str0ng!pw", "confirm_password": "Str0ng!pw"},
    )
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = client.post(
        "/api/v1/auth/login", json={"username": "alice", "password": "Str0ng!pw"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["username"] == "alice"

    # Token is single use
    response = client.post(
        "/api/v1/auth/set-password",
        json={"token": token, "password": "An0ther!pw", "confirm_password": "An0ther!pw"},
    )
    assert response.status_code == 400


def test_set_password_weak_password(client):
    """Test that every password rule violation is reported."""
    response = client.post(
        "/api/v1/auth/set-password",
        json={"token": "abc", "password": "weak", "confirm_password": "weaker"},
    )
    assert response.status_code == 400
    messages = [e["message"] for e in response.json()["errors"]]
    assert "Password must be at least 8 characters" in messages
    assert "Password must contain at least one uppercase letter" in messages
    assert "Password must contain at least one number" in messages
    assert "Password must contain at least one special character" in messages
    assert "Passwords must match" in messages


def test_login_wrong_password(client, auth_headers):
    """Test login with wrong password."""
    response = client.post(
        "/api/v1/auth/login", json={"username": "testuser", "password": "Wr0ng!pass"}
    )
    assert response.status_code == 401


def test_login_does_not_reveal_unknown_user(client, auth_headers):
    """Test that unknown users and wrong passwords look the same."""
    wrong_password = client.post(
        "/api/v1/auth/login", json={"username": "testuser", "password": "Wr0ng!pass"}
    )
    unknown_user = client.post(
        "/api/v1/auth/login", json={"username": "nobody", "password": "Wr0ng!pass"}
    )
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()


def test_login_before_password_setup(client):
    """Test that accounts without a password cannot log in."""
    client.post("/api/v1/users", json={"username": "henry", "email": "henry@example.com"})
    response = client.post("/api/v1/auth/login", json={"username": "henry", "password": ""})
    assert response.status_code == 401


def test_get_current_user(client, auth_headers):
    """Test getting current user info."""
    response = client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == auth_headers.email


def test_invalid_token_rejected(client):
    """Test that a garbage bearer token is rejected."""
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 401


def test_forgot_password_issues_new_token(client, db, outbox, auth_headers):
    """Test that forgot-password stores a fresh token and emails it."""
    outbox.sent.clear()
    response = client.post("/api/v1/auth/forgot-password", json={"email": auth_headers.email})
    assert response.status_code == 202

    user = db.query(User).filter(User.id == auth_headers.user_id).one()
    db.refresh(user)
    assert user.password_reset_token is not None
    assert outbox.sent == [(auth_headers.email, "testuser", user.password_reset_token)]


def test_forgot_password_unknown_email(client, outbox):
    """Test that unknown emails get the same response and no email."""
    response = client.post("/api/v1/auth/forgot-password", json={"email": "who@example.com"})
    assert response.status_code == 202
    assert outbox.sent == []


def test_export_users_csv(client, admin_headers):
    """Test exporting users as CSV."""
    client.post("/api/v1/users", json={"username": "ivan", "email": "ivan@example.com"})
    client.post("/api/v1/users", json={"username": "root", "email": "root@admin.com"})

    response = client.get("/api/v1/users/export", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")

    rows = list(csv.reader(StringIO(response.content.decode("utf-8"))))
    assert rows[0] == [
        "id",
        "username",
        "email",
        "is_admin",
        "email_enabled",
        "slack_enabled",
        "slack_webhook_url",
    ]
    assert len(rows) == 4
    assert rows[1][1:4] == ["boss", "boss@admin.com", "True"]
    assert rows[2][1:5] == ["ivan", "ivan@example.com", "False", "True"]
    assert rows[3][3] == "True"


def test_delete_user_requires_admin(client, auth_headers):
    """Test that regular users cannot delete accounts."""
    response = client.delete(f"/api/v1/users/{auth_headers.user_id}", headers=auth_headers)
    assert response.status_code == 403


def test_admin_deletes_user_with_posts(client, db, auth_headers, admin_headers):
    """Test that deleting a user removes their posts and preferences."""
    client.post(
        "/api/v1/posts",
        headers=auth_headers,
        json={"title": "Doomed post", "content": "This post goes away with its author."},
    )

    response = client.delete(f"/api/v1/users/{auth_headers.user_id}", headers=admin_headers)
    assert response.status_code == 204

    response = client.get(f"/api/v1/users/{auth_headers.user_id}", headers=admin_headers)
    assert response.status_code == 404
    response = client.get(f"/api/v1/posts/user/{auth_headers.user_id}", headers=admin_headers)
    assert response.json() == []


def test_unauthorized_access(client):
    """Test that post endpoints require authentication."""
    response = client.get("/api/v1/posts")
    assert response.status_code in (401, 403)


def test_export_requires_admin(client, auth_headers):
    """Test that the CSV export is limited to administrators."""
    assert client.get("/api/v1/users/export").status_code in (401, 403)

    response = client.get("/api/v1/users/export", headers=auth_headers)
    assert response.status_code == 403
