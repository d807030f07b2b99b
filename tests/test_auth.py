from conftest import login


def test_signup_creates_active_user(client, db):
    response = client.post(
        "/api/v1/auth/signup",
        json={"name": "Ada Lovelace", "email": " Ada@Example.com ", "password": "password123"},
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["email"] == "ada@example.com"
    assert data["status"] == "active"
    assert data["isAdmin"] is False
    assert data["canAddNumbers"] is False
    assert "password" not in data

    [stored] = db.users.docs
    assert stored["password"] != "password123"


def test_signup_rejects_duplicate_email(client, db):
    db.add_user("ada@example.com")

    response = client.post(
        "/api/v1/auth/signup",
        json={"name": "Ada", "email": "ADA@example.com", "password": "password123"},
    )

    assert response.status_code == 409
    assert response.json()["error"] == "User with this email already exists."


def test_signup_disabled(client, db):
    db.set_setting("signupEnabled", False)

    response = client.post(
        "/api/v1/auth/signup",
        json={"name": "Ada", "email": "ada@example.com", "password": "password123"},
    )

    assert response.status_code == 403
    assert response.json()["error"] == "Signups are currently disabled."
    assert db.users.docs == []


def test_signup_validates_fields(client, db):
    response = client.post(
        "/api/v1/auth/signup",
        json={"name": "A", "email": "not-an-email", "password": "short"},
    )

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_login_sets_cookie_and_me(client, db):
    db.add_user("user@example.com", name="Grace")

    response = login(client, "user@example.com")
    assert "token" in response.cookies
    assert response.json()["name"] == "Grace"

    me = client.get("/api/v1/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == "user@example.com"


def test_login_wrong_password(client, db):
    db.add_user("user@example.com")

    response = client.post("/api/v1/auth/login", json={"email": "user@example.com", "password": "nope-nope"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid email or password."


def test_login_unknown_email(client, db):
    response = client.post("/api/v1/auth/login", json={"email": "ghost@example.com", "password": "password123"})
    assert response.status_code == 401


def test_logout_clears_session(user_client):
    response = user_client.post("/api/v1/auth/logout")
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert user_client.get("/api/v1/auth/me").status_code == 401


def test_profile_update(user_client, db):
    response = user_client.put("/api/v1/users/me", json={"name": "New Name", "email": "new@example.com"})

    assert response.status_code == 200, response.text
    assert response.json()["name"] == "New Name"
    assert response.json()["email"] == "new@example.com"
    assert db.users.docs[0]["email"] == "new@example.com"


def test_profile_email_change_disabled(user_client, db):
    db.set_setting("emailChangeEnabled", False)

    response = user_client.put("/api/v1/users/me", json={"name": "New Name", "email": "new@example.com"})
    assert response.status_code == 403
    assert response.json()["error"] == "Email changes are disabled by the administrator."

    # Name-only changes are still allowed
    response = user_client.put("/api/v1/users/me", json={"name": "New Name", "email": "user@example.com"})
    assert response.status_code == 200
    assert response.json()["name"] == "New Name"


def test_profile_email_taken(user_client, db):
    db.add_user("taken@example.com")

    response = user_client.put("/api/v1/users/me", json={"name": "Someone", "email": "taken@example.com"})
    assert response.status_code == 409
