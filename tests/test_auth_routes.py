from __future__ import annotations

from storefront.auth.session import COOKIE_NAME
from storefront.auth.tokens import issue_token, sign_payload
from storefront.settings_service import set_legacy_secret


def test_login_sets_cookie_and_returns_token(client, make_admin):
    make_admin("alice", "hunter22")
    r = client.post("/api/admin/login", json={"username": "alice", "password": "hunter22"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"]["token"]
    assert body["data"]["admin"]["username"] == "alice"
    assert "password_hash" not in body["data"]["admin"]

    set_cookie = r.headers["set-cookie"]
    assert set_cookie.startswith(f"{COOKIE_NAME}=")
    assert "HttpOnly" in set_cookie
    assert "samesite=strict" in set_cookie.lower()

    me = client.get("/api/admin/me")
    assert me.status_code == 200
    assert me.json()["data"]["username"] == "alice"


def test_login_failures(client, make_admin):
    make_admin("alice", "hunter22")

    r = client.post("/api/admin/login", json={"username": "alice", "password": "wrong"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "Invalid username or password"}

    r = client.post("/api/admin/login", json={"username": "alice"})
    assert r.status_code == 400

    r = client.post("/api/admin/login", json={})
    assert r.status_code == 400


def test_legacy_password_login(client, db, make_admin):
    make_admin("first")
    set_legacy_secret(db, "shared-secret")

    r = client.post("/api/admin/login", json={"password": "shared-secret"})
    assert r.status_code == 200
    assert r.json()["data"]["admin"]["username"] == "first"


def test_bearer_header_is_accepted(client, auth_headers):
    r = client.get("/api/admin/me", headers=auth_headers)
    assert r.status_code == 200


def test_admin_routes_require_token(client, admin):
    assert client.get("/api/admin/me").status_code == 401
    assert client.get("/api/admin/users").status_code == 401
    r = client.get("/api/admin/users", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.json()["error"] == "Invalid or expired token"


def test_non_admin_token_is_forbidden(client, admin):
    token = sign_payload({"admin_id": admin.id, "username": admin.username, "iat": 0, "exp": 4102444800})
    r = client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403


def test_old_format_token_is_accepted(client, admin):
    token = sign_payload({"is_admin": True, "iat": 0, "exp": 4102444800})
    r = client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["data"]["id"] == admin.id


def test_logout_clears_cookie_only(client, make_admin):
    make_admin("alice", "hunter22")
    token = client.post("/api/admin/login", json={"username": "alice", "password": "hunter22"}).json()["data"]["token"]

    r = client.delete("/api/admin/login")
    assert r.status_code == 200
    assert client.get("/api/admin/me").status_code == 401

    # No server-side revocation: the token itself is still good until it expires
    r = client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200


def test_change_password(client, make_admin):
    a = make_admin("alice", "hunter22")
    headers = {"Authorization": f"Bearer {issue_token(a.id, a.username)}"}
    r = client.put("/api/admin/change-password", headers=headers,
                   json={"current_password": "wrong", "new_password": "brandnew1"})
    assert r.status_code == 400

    r = client.put("/api/admin/change-password", headers=headers,
                   json={"current_password": "hunter22", "new_password": "brandnew1"})
    assert r.status_code == 200

    r = client.post("/api/admin/login", json={"username": "alice", "password": "brandnew1"})
    assert r.status_code == 200


def test_rotate_legacy_secret(client, auth_headers):
    r = client.put("/api/admin/legacy-secret", headers=auth_headers, json={"secret": "new-shared"})
    assert r.status_code == 200
    r = client.post("/api/admin/login", json={"password": "new-shared"})
    assert r.status_code == 200
