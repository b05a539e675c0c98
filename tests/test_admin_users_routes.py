from __future__ import annotations

from storefront.auth.tokens import issue_token


def test_list_and_create_admins(client, auth_headers):
    r = client.post("/api/admin/users", headers=auth_headers,
                    json={"username": "bob", "password": "secret123", "email": "Bob@Shop.id"})
    assert r.status_code == 201
    created = r.json()["data"]
    assert created["username"] == "bob"
    assert created["email"] == "bob@shop.id"
    assert created["role"] == "admin"

    r = client.get("/api/admin/users", headers=auth_headers)
    assert r.status_code == 200
    names = [a["username"] for a in r.json()["data"]]
    assert names == ["bob", "admin"]
    assert all("password_hash" not in a for a in r.json()["data"])


def test_create_admin_rejects_duplicates_and_short_fields(client, auth_headers):
    r = client.post("/api/admin/users", headers=auth_headers, json={"username": "admin", "password": "secret123"})
    assert r.status_code == 400
    assert r.json()["error"] == "Username already exists"

    r = client.post("/api/admin/users", headers=auth_headers, json={"username": "bo", "password": "secret123"})
    assert r.status_code == 400

    r = client.post("/api/admin/users", headers=auth_headers, json={"username": "bobby", "password": "123"})
    assert r.status_code == 400


def test_last_active_admin_cannot_be_deleted_or_deactivated(client, admin, auth_headers):
    r = client.delete(f"/api/admin/users/{admin.id}", headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Cannot delete the last active admin"

    r = client.put(f"/api/admin/users/{admin.id}", headers=auth_headers, json={"is_active": False})
    assert r.status_code == 400
    assert r.json()["error"] == "Cannot deactivate the last active admin"


def test_deactivate_and_delete_other_admin(client, auth_headers):
    bob = client.post("/api/admin/users", headers=auth_headers,
                      json={"username": "bob", "password": "secret123"}).json()["data"]

    r = client.put(f"/api/admin/users/{bob['id']}", headers=auth_headers, json={"is_active": False})
    assert r.status_code == 200
    assert r.json()["data"]["is_active"] is False

    r = client.post("/api/admin/login", json={"username": "bob", "password": "secret123"})
    assert r.status_code == 401

    r = client.delete(f"/api/admin/users/{bob['id']}", headers=auth_headers)
    assert r.status_code == 200

    r = client.get(f"/api/admin/users/{bob['id']}", headers=auth_headers)
    assert r.status_code == 404


def _bearer(a) -> dict:
    return {"Authorization": f"Bearer {issue_token(a.id, a.username)}"}


def test_plain_admin_cannot_manage_accounts(client, admin, make_admin):
    staff = make_admin("staff", role="admin")
    headers = _bearer(staff)

    assert client.get("/api/admin/users", headers=headers).status_code == 200

    r = client.post("/api/admin/users", headers=headers,
                    json={"username": "mallory", "password": "secret123", "role": "super_admin"})
    assert r.status_code == 403
    assert r.json()["error"] == "Insufficient permissions"

    assert client.put(f"/api/admin/users/{admin.id}", headers=headers, json={"is_active": False}).status_code == 403
    assert client.delete(f"/api/admin/users/{admin.id}", headers=headers).status_code == 403
    assert client.get(f"/api/admin/users/{admin.id}", headers=headers).json()["data"]["is_active"] is True


def test_deactivated_super_admin_token_cannot_manage(client, make_admin):
    make_admin("boss")
    old = make_admin("old", is_active=False)
    r = client.post("/api/admin/users", headers=_bearer(old), json={"username": "bob", "password": "secret123"})
    assert r.status_code == 403


def test_last_super_admin_guard_over_http(client, admin, auth_headers, make_admin):
    staff = make_admin("staff", role="admin")

    r = client.delete(f"/api/admin/users/{admin.id}", headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Cannot delete the last super admin"

    r = client.put(f"/api/admin/users/{admin.id}", headers=auth_headers, json={"role": "admin"})
    assert r.status_code == 400
    assert r.json()["error"] == "Cannot demote the last super admin"

    r = client.put(f"/api/admin/users/{staff.id}", headers=auth_headers, json={"role": "super_admin"})
    assert r.status_code == 200
    assert r.json()["data"]["role"] == "super_admin"

    r = client.put(f"/api/admin/users/{admin.id}", headers=auth_headers, json={"role": "admin"})
    assert r.status_code == 200


def test_refused_update_leaves_email_unchanged(client, admin, auth_headers):
    r = client.put(f"/api/admin/users/{admin.id}", headers=auth_headers,
                   json={"email": "new@example.com", "is_active": False})
    assert r.status_code == 400
    assert r.json()["error"] == "Cannot deactivate the last active admin"

    r = client.get(f"/api/admin/users/{admin.id}", headers=auth_headers)
    assert r.json()["data"]["email"] is None
