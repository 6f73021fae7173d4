from datetime import timedelta

from fastapi.testclient import TestClient

from student_service.main import create_app


def test_register_user_success(client):
    """Registration returns the public user without the password hash"""
    response = client.post(
        "/api/auth/register",
        json={"name": "Test User", "email": "test@example.com", "password": "password123"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "User registered successfully"
    assert data["user"]["email"] == "test@example.com"
    assert data["user"]["role"] == "user"
    assert data["user"]["name"] == "Test User"
    assert "id" in data["user"]
    assert "createdAt" in data["user"]
    assert "password" not in response.text
    assert "passwordHash" not in data["user"]


def test_register_user_duplicate(client):
    """Second registration with the same email is a conflict"""
    payload = {"name": "Test User", "email": "test@example.com", "password": "password123"}
    assert client.post("/api/auth/register", json=payload).status_code == 201

    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 409
    assert response.json()["message"] == "User with this email already exists"


def test_register_normalizes_email(client, app):
    response = client.post(
        "/api/auth/register",
        json={"name": "Test User", "email": "  Test@Example.COM ", "password": "password123"}
    )
    assert response.status_code == 201
    assert response.json()["user"]["email"] == "test@example.com"
    assert app.state.users.find_by_email("test@example.com") is not None


def test_register_user_invalid_email(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Test User", "email": "invalid-email", "password": "password123"}
    )
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Validation failed"
    assert {"field": "email", "message": "Please provide a valid email"} in data["details"]


def test_register_user_short_password(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Test User", "email": "test@example.com", "password": "123"}
    )
    assert response.status_code == 400
    fields = [d["field"] for d in response.json()["details"]]
    assert fields == ["password"]


def test_register_cannot_choose_role(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Sneaky", "email": "sneaky@example.com", "password": "password123", "role": "admin"}
    )
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "user"


def test_login_success(client, user):
    response = client.post(
        "/api/auth/login",
        json={"email": "test@example.com", "password": "password123"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["token"]
    assert data["token_type"] == "bearer"
    assert data["user"]["id"] == user.id


def test_login_token_opens_student_routes(client, user):
    token = client.post(
        "/api/auth/login",
        json={"email": "test@example.com", "password": "password123"}
    ).json()["token"]

    response = client.get("/api/students", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_login_invalid_credentials(client, user):
    response = client.post(
        "/api/auth/login",
        json={"email": "test@example.com", "password": "wrongpassword"}
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


def test_login_nonexistent_user(client):
    response = client.post(
        "/api/auth/login",
        json={"email": "nonexistent@example.com", "password": "password123"}
    )
    assert response.status_code == 401


def test_me_endpoint_success(client, user, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == "test@example.com"
    assert data["user"]["id"] == user.id


def test_me_endpoint_invalid_token(client):
    response = client.get(
        "/api/auth/me",
        headers={"Authorization": "Bearer invalid_token"}
    )
    assert response.status_code == 403
    assert response.json()["error"] == "Invalid token"


def test_me_endpoint_no_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["error"] == "Access denied"


def test_me_endpoint_unknown_user(client, app):
    from student_service.domain.entities import PublicUser

    ghost = PublicUser(id=99, email="ghost@example.com", name="Ghost")
    token = app.state.token_service.issue(ghost)
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_list_users_requires_admin(client, auth_headers):
    response = client.get("/api/auth/users", headers=auth_headers)
    assert response.status_code == 403


def test_list_users_as_admin(client, app, user):
    admin = app.state.users.create(email="root@example.com", password="password123", name="Root", role="admin")
    token = app.state.token_service.issue(admin)

    response = client.get("/api/auth/users", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert {u["email"] for u in data["users"]} == {"test@example.com", "root@example.com"}
    assert all("passwordHash" not in u for u in data["users"])


def test_expired_token_on_me(client, app, user):
    token = app.state.token_service.issue(user, expires_delta=timedelta(seconds=-5))
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["error"] == "Token expired"


def _login_attempts(client, count):
    return [
        client.post(
            "/api/auth/login",
            json={"email": "nobody@example.com", "password": "password123"}
        ).status_code
        for _ in range(count)
    ]


def test_rate_limiting(settings):
    """Login is cut off after ten attempts per minute from one address"""
    client = TestClient(create_app(settings.model_copy(update={"RATE_LIMIT_ENABLED": True})))
    statuses = _login_attempts(client, 11)

    assert statuses[:10] == [401] * 10
    assert statuses[10] == 429


def test_register_limit_comes_from_app_settings(settings):
    limited = settings.model_copy(update={"RATE_LIMIT_ENABLED": True, "RATE_LIMIT_PER_MINUTE": 2})
    client = TestClient(create_app(limited))
    statuses = [
        client.post(
            "/api/auth/register",
            json={"name": "Test User", "email": f"user{i}@example.com", "password": "password123"}
        ).status_code
        for i in range(3)
    ]

    assert statuses == [201, 201, 429]


def test_apps_do_not_share_rate_limit_state(settings):
    limited_app = create_app(settings.model_copy(update={"RATE_LIMIT_ENABLED": True}))
    open_app = create_app(settings)
    assert limited_app.state.limiter is not open_app.state.limiter

    # a second limited app starts with fresh counters
    TestClient(create_app(settings.model_copy(update={"RATE_LIMIT_ENABLED": True}))).post(
        "/api/auth/login", json={"email": "nobody@example.com", "password": "x"}
    )

    assert _login_attempts(TestClient(open_app), 11) == [401] * 11
    assert _login_attempts(TestClient(limited_app), 11)[10] == 429
