"""Authentication routes and bearer-token enforcement."""


def test_health(client):
    assert client.get("/api/health/").json() == {"status": "ok"}
    assert client.get("/api/health/ready").json()["status"] == "ready"


def test_me_returns_current_account(client, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["display_name"] == "Pastor Jo"


def test_duplicate_registration_is_rejected(client, auth_headers):
    response = client.post(
        "/api/auth/register",
        json={"email": "JO@example.org", "password": "another-password"},
    )
    assert response.status_code == 400


def test_wrong_password_is_rejected(client, auth_headers):
    response = client.post(
        "/api/auth/login", json={"email": "jo@example.org", "password": "wrong-password"}
    )
    assert response.status_code == 400


def test_refresh_issues_new_tokens(client):
    client.post(
        "/api/auth/register", json={"email": "sam@example.org", "password": "long-enough"}
    )
    tokens = client.post(
        "/api/auth/login", json={"email": "sam@example.org", "password": "long-enough"}
    ).json()
    response = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_access_token_cannot_be_used_as_refresh_token(client, auth_headers):
    access = auth_headers["Authorization"].split()[1]
    response = client.post("/api/auth/refresh", json={"refresh_token": access})
    assert response.status_code == 401


def test_routes_require_bearer_token(client):
    assert client.get("/api/members/").status_code == 401
    assert client.get("/api/members/", headers={"Authorization": "Bearer nope"}).status_code == 401
    assert client.post("/api/members/", json={"name": "SMITH, JOHN"}).status_code == 401
