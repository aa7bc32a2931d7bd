from __future__ import annotations

from conftest import signup


def test_signup_login_logout_cycle(client) -> None:
    user = signup(client, email="  Ana@Example.com ")
    assert user["email"] == "ana@example.com"
    assert user["profileType"] is None

    me = client.get("/api/user/profile")
    assert me.status_code == 200
    assert me.json()["user"]["id"] == user["id"]

    assert client.post("/api/auth/logout").json() == {"success": True}
    assert client.get("/api/user/profile").status_code == 401

    bad = client.post("/api/auth/login", json={"email": "ana@example.com", "password": "wrong-pass"})
    assert bad.status_code == 401
    assert bad.json() == {"error": "invalid_credentials"}

    ok = client.post("/api/auth/login", json={"email": "ANA@example.com", "password": "secret123"})
    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == "ana@example.com"


def test_signup_validation_errors(client) -> None:
    missing = client.post("/api/auth/signup", json={"email": "x@example.com", "password": "secret123"})
    assert missing.status_code == 400
    assert missing.json()["error"] == "missing_fields"

    short = client.post("/api/auth/signup", json={"name": "X", "email": "x@example.com", "password": "123"})
    assert short.status_code == 400
    assert short.json()["error"] == "password_too_short"

    signup(client, email="x@example.com")
    taken = client.post("/api/auth/signup", json={"name": "Y", "email": "X@example.com", "password": "secret123"})
    assert taken.status_code == 400
    assert taken.json()["error"] == "email_taken"


def test_api_routes_require_session(client) -> None:
    for path in ("/api/risks", "/api/protocols", "/api/dashboard/overview", "/api/reports"):
        response = client.get(path)
        assert response.status_code == 401, path
        assert response.json() == {"error": "unauthorized"}


def test_html_login_flow(client) -> None:
    page = client.get("/login")
    assert page.status_code == 200
    assert "<form" in page.text

    assert client.get("/dashboard", follow_redirects=False).headers["location"] == "/login"
    assert client.get("/", follow_redirects=False).headers["location"] == "/login"

    failed = client.post("/login", data={"email": "nobody@example.com", "password": "nope123"})
    assert failed.status_code == 400
    assert "Email o contraseña incorrectos" in failed.text

    signup(client, email="html@example.com")
    client.get("/logout", follow_redirects=False)
    ok = client.post(
        "/login",
        data={"email": "html@example.com", "password": "secret123"},
        follow_redirects=False,
    )
    assert ok.status_code == 302
    assert ok.headers["location"] == "/dashboard"

    dashboard = client.get("/dashboard")
    assert dashboard.status_code == 200


def test_profile_update_rules(client) -> None:
    signup(client, email="other@example.com")
    client.post("/api/auth/logout")
    signup(client, email="me@example.com")

    taken = client.patch("/api/user/profile", json={"email": "other@example.com"})
    assert taken.status_code == 400
    assert taken.json()["error"] == "email_taken"

    wrong = client.patch("/api/user/profile", json={"currentPassword": "nope", "newPassword": "another123"})
    assert wrong.status_code == 400
    assert wrong.json()["error"] == "invalid_current_password"

    short = client.patch("/api/user/profile", json={"currentPassword": "secret123", "newPassword": "abc"})
    assert short.status_code == 400
    assert short.json()["error"] == "password_too_short"

    ok = client.patch(
        "/api/user/profile",
        json={"name": "Nuevo Nombre", "currentPassword": "secret123", "newPassword": "another123"},
    )
    assert ok.status_code == 200
    assert ok.json()["user"]["name"] == "Nuevo Nombre"

    client.post("/api/auth/logout")
    relogin = client.post("/api/auth/login", json={"email": "me@example.com", "password": "another123"})
    assert relogin.status_code == 200
