"""Profile API tests — GET /users/me and PATCH /users."""

import pytest

from conftest import bearer, signup


@pytest.mark.asyncio
async def test_me_has_no_password_hash(client, alice):
    r = await client.get("/users/me", headers=alice)
    assert r.status_code == 200
    me = r.json()
    assert me["email"] == "alice@test.io"
    assert me["first_name"] is None
    assert "password" not in me
    assert "password_hash" not in me


@pytest.mark.asyncio
async def test_edit_names(client, alice):
    r = await client.patch(
        "/users", json={"first_name": "Alice", "last_name": "Liddell"}, headers=alice
    )
    assert r.status_code == 200
    assert r.json()["first_name"] == "Alice"
    assert r.json()["last_name"] == "Liddell"

    me = (await client.get("/users/me", headers=alice)).json()
    assert me["first_name"] == "Alice"
    assert me["email"] == "alice@test.io"


@pytest.mark.asyncio
async def test_edit_email_then_sign_in_with_it(client, alice):
    r = await client.patch("/users", json={"email": "Alice@New.io"}, headers=alice)
    assert r.status_code == 200
    assert r.json()["email"] == "alice@new.io"

    r = await client.post(
        "/auth/signin", json={"email": "alice@new.io", "password": "pw1"}
    )
    assert r.status_code == 200

    r = await client.post(
        "/auth/signin", json={"email": "alice@test.io", "password": "pw1"}
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_edit_email_to_own_address(client, alice):
    r = await client.patch("/users", json={"email": "alice@test.io"}, headers=alice)
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_edit_email_taken(client, alice, bob):
    r = await client.patch("/users", json={"email": "bob@test.io"}, headers=alice)
    assert r.status_code == 403
    assert r.json()["error"] == "email_taken"

    me = (await client.get("/users/me", headers=alice)).json()
    assert me["email"] == "alice@test.io"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"email": "not-an-email"},
        {"email": None},
        {"first_name": "x" * 101},
    ],
)
async def test_edit_validation(client, alice, body):
    r = await client.patch("/users", json=body, headers=alice)
    assert r.status_code == 400
    assert r.json()["error"] == "validation_failure"


@pytest.mark.asyncio
async def test_profile_routes_require_token(client):
    assert (await client.get("/users/me")).status_code == 401
    assert (await client.patch("/users", json={"first_name": "x"})).status_code == 401


@pytest.mark.asyncio
async def test_token_keeps_working_after_email_change(client):
    token = await signup(client, "carol@test.io")
    r = await client.patch("/users", json={"email": "c@test.io"}, headers=bearer(token))
    assert r.status_code == 200

    r = await client.get("/users/me", headers=bearer(token))
    assert r.json()["email"] == "c@test.io"
