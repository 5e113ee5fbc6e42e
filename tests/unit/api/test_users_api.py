"""Users API: status mapping of pipeline outcomes, audit trail through HTTP, public reads."""

import pytest
from httpx import AsyncClient

from user_audit.governance.audit_models import AuditAction
from user_audit.governance.exceptions import AuditStoreUnavailableError
from user_audit.security.rbac import Role


def _create_body(**overrides):
    body = {
        "name": "richard",
        "lastname": "kendy",
        "email": "Richard@Gmail.com",
        "password": "Test123##",
        "confirmPassword": "Test123##",
    }
    body.update(overrides)
    return body


async def test_admin_creates_user_and_audit_carries_correlation_id(
    async_client: AsyncClient, admin, audit_store, auth_headers
):
    headers = {**auth_headers(admin), "X-Correlation-ID": "corr-api-1"}
    r = await async_client.post("/users/", json=_create_body(), headers=headers)

    assert r.status_code == 201
    data = r.json()
    assert data["name"] == "Richard"
    assert data["email"] == "richard@gmail.com"
    assert data["roles"] == ["USER"]
    assert "password" not in r.text and "hashed::" not in r.text
    assert r.headers["X-Correlation-ID"] == "corr-api-1"

    assert len(audit_store.entries) == 1
    entry = audit_store.entries[0]
    assert entry.action == AuditAction.CREATE
    assert entry.actor_id == admin.id
    assert entry.entity_id == data["id"]
    assert entry.correlation_id == "corr-api-1"


async def test_create_without_token_is_401(async_client: AsyncClient, user_store, audit_store):
    r = await async_client.post("/users/", json=_create_body())

    assert r.status_code == 401
    assert r.json()["reason"] == "PRINCIPAL_MISSING"
    assert user_store.mutations == []
    assert audit_store.entries == []


async def test_plain_user_gets_403_with_required_roles(
    async_client: AsyncClient, plain_user, auth_headers
):
    r = await async_client.post("/users/", json=_create_body(), headers=auth_headers(plain_user))

    assert r.status_code == 403
    body = r.json()
    assert body["reason"] == "INSUFFICIENT_ROLE"
    assert body["required_roles"] == ["ADMIN", "SUPERADMIN"]
    assert body["correlation_id"] == r.headers["X-Correlation-ID"]


async def test_expired_token_is_401(async_client: AsyncClient, admin, auth_headers):
    r = await async_client.post(
        "/users/", json=_create_body(), headers=auth_headers(admin, expired=True)
    )

    assert r.status_code == 401
    assert r.json()["reason"] == "EXPIRED_TOKEN"


async def test_token_with_wrong_signature_is_401(async_client: AsyncClient, admin, auth_headers):
    headers = auth_headers(admin, secret="another-secret-key-at-least-32-chars")
    r = await async_client.post("/users/", json=_create_body(), headers=headers)

    assert r.status_code == 401
    assert r.json()["reason"] == "INVALID_TOKEN"


async def test_inactive_principal_is_401(async_client: AsyncClient, user_store, make_user, auth_headers):
    inactive = user_store.seed(make_user(Role.ADMIN, is_active=False))
    r = await async_client.post("/users/", json=_create_body(), headers=auth_headers(inactive))

    assert r.status_code == 401
    assert r.json()["reason"] == "PRINCIPAL_INACTIVE"


async def test_password_mismatch_is_400(async_client: AsyncClient, admin, auth_headers, audit_store):
    r = await async_client.post(
        "/users/",
        json=_create_body(confirmPassword="Test124##"),
        headers=auth_headers(admin),
    )

    assert r.status_code == 400
    assert r.json()["reason"] == "PASSWORD_MISMATCH"
    assert audit_store.entries == []


async def test_duplicate_email_is_400_without_audit(
    async_client: AsyncClient, admin, auth_headers, audit_store
):
    r = await async_client.post(
        "/users/", json=_create_body(email="admin@example.com"), headers=auth_headers(admin)
    )

    assert r.status_code == 400
    assert r.json()["reason"] == "DUPLICATE_ENTITY"
    assert audit_store.entries == []


async def test_weak_password_is_422(async_client: AsyncClient, admin, auth_headers):
    r = await async_client.post(
        "/users/",
        json=_create_body(password="weak", confirmPassword="weak"),
        headers=auth_headers(admin),
    )
    assert r.status_code == 422


async def test_admin_cannot_grant_privileged_role(async_client: AsyncClient, admin, auth_headers):
    r = await async_client.post(
        "/users/", json=_create_body(roles=["superadmin"]), headers=auth_headers(admin)
    )

    assert r.status_code == 403
    body = r.json()
    assert body["reason"] == "CANNOT_GRANT_PRIVILEGED_ROLE"
    assert body["required_roles"] == ["SUPERADMIN"]


async def test_admin_cannot_modify_superadmin(
    async_client: AsyncClient, admin, superadmin, auth_headers, user_store
):
    r = await async_client.patch(
        f"/users/{superadmin.id}", json={"isActive": False}, headers=auth_headers(admin)
    )

    assert r.status_code == 403
    assert r.json()["reason"] == "CANNOT_MODIFY_PRIVILEGED_ACCOUNT"
    assert user_store.records[superadmin.id].is_active is True


async def test_update_unknown_user_is_404(async_client: AsyncClient, admin, auth_headers):
    r = await async_client.patch("/users/missing-id", json={"name": "Bob"}, headers=auth_headers(admin))

    assert r.status_code == 404
    assert r.json()["reason"] == "ENTITY_NOT_FOUND"


async def test_update_records_before_and_after(
    async_client: AsyncClient, admin, plain_user, auth_headers, audit_store
):
    r = await async_client.patch(
        f"/users/{plain_user.id}", json={"name": "renamed"}, headers=auth_headers(admin)
    )

    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"
    entry = audit_store.entries[0]
    assert entry.action == AuditAction.UPDATE
    assert entry.before_state.name == "Test"
    assert entry.after_state.name == "Renamed"


async def test_update_with_empty_roles_is_422(
    async_client: AsyncClient, admin, plain_user, auth_headers, user_store
):
    r = await async_client.patch(
        f"/users/{plain_user.id}", json={"roles": []}, headers=auth_headers(admin)
    )

    assert r.status_code == 422
    assert user_store.records[plain_user.id].roles == frozenset({Role.USER})


async def test_empty_update_is_422(async_client: AsyncClient, admin, plain_user, auth_headers):
    r = await async_client.patch(f"/users/{plain_user.id}", json={}, headers=auth_headers(admin))

    assert r.status_code == 422
    assert r.json()["reason"] == "VALIDATION_ERROR"


async def test_delete_deactivates_by_default(
    async_client: AsyncClient, admin, plain_user, auth_headers, user_store, audit_store
):
    r = await async_client.delete(f"/users/{plain_user.id}", headers=auth_headers(admin))

    assert r.status_code == 204
    assert user_store.records[plain_user.id].is_active is False
    entry = audit_store.entries[0]
    assert entry.action == AuditAction.DEACTIVATE
    assert entry.before_state.is_active is True
    assert entry.after_state.is_active is False


async def test_hard_delete_removes_record(
    async_client: AsyncClient, admin, plain_user, auth_headers, user_store, audit_store
):
    r = await async_client.delete(
        f"/users/{plain_user.id}", params={"hard": "true"}, headers=auth_headers(admin)
    )

    assert r.status_code == 204
    assert plain_user.id not in user_store.records
    entry = audit_store.entries[0]
    assert entry.action == AuditAction.DELETE
    assert entry.after_state is None


async def test_audit_failure_does_not_fail_request(
    async_client: AsyncClient, admin, auth_headers, audit_store, user_store
):
    audit_store.fail_with = AuditStoreUnavailableError("audit db down")
    r = await async_client.post("/users/", json=_create_body(), headers=auth_headers(admin))

    assert r.status_code == 201
    assert user_store.mutations == ["create"]
    assert audit_store.entries == []


async def test_list_users_uses_default_limit(async_client: AsyncClient, admin, superadmin, plain_user):
    r = await async_client.get("/users/")

    assert r.status_code == 200
    assert len(r.json()) == 2

    r = await async_client.get("/users/", params={"limit": 5, "offset": 1})
    assert len(r.json()) == 2


async def test_list_users_rejects_bad_pagination(async_client: AsyncClient):
    assert (await async_client.get("/users/", params={"limit": 0})).status_code == 422
    assert (await async_client.get("/users/", params={"offset": -1})).status_code == 422


async def test_find_user_by_email_or_id(async_client: AsyncClient, plain_user):
    by_email = await async_client.get("/users/USER@example.com")
    by_id = await async_client.get(f"/users/{plain_user.id}")

    assert by_email.status_code == 200
    assert by_email.json()["id"] == plain_user.id
    assert by_id.json()["email"] == "user@example.com"


async def test_find_unknown_user_is_404(async_client: AsyncClient):
    r = await async_client.get("/users/nobody@example.com")

    assert r.status_code == 404
    assert r.json()["reason"] == "ENTITY_NOT_FOUND"
    assert r.json()["correlation_id"] == r.headers["X-Correlation-ID"]
