"""
Tests for authentication endpoints.
"""

from datetime import timedelta

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from profile_api.core.security import JWTTokenIssuer
from profile_api.models.user import User
from tests.conftest import API, PASSWORD, auth

NEW_USER = {
    "firstName": "John",
    "lastName": "Doe",
    "email": "John.Doe@Example.com",
    "password": PASSWORD,
    "department": "Engineering",
}


@pytest.mark.asyncio
async def test_register_success(client: AsyncClient, app: FastAPI):
    """Test registering a new user returns a public profile and token."""
    response = await client.post(f"{API}/auth/register", json=NEW_USER)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["message"] == "User registered successfully"
    user = body["data"]["user"]
    assert user["email"] == "john.doe@example.com"
    assert user["role"] == "user"
    assert user["fullName"] == "John Doe"
    assert "password" not in user
    assert "hashedPassword" not in user
    assert app.state.token_issuer.verify(body["data"]["token"]) == user["id"]


@pytest.mark.asyncio
async def test_register_admin_role(client: AsyncClient):
    """Test registering with an explicit admin role."""
    response = await client.post(f"{API}/auth/register", json={**NEW_USER, "role": "admin"})

    assert response.status_code == 201
    assert response.json()["data"]["user"]["role"] == "admin"


@pytest.mark.asyncio
async def test_register_duplicate_email_case_insensitive(client: AsyncClient):
    """Test registering the same email twice, in different case."""
    first = await client.post(f"{API}/auth/register", json=NEW_USER)
    assert first.status_code == 201

    response = await client.post(
        f"{API}/auth/register",
        json={**NEW_USER, "email": "JOHN.DOE@EXAMPLE.COM"},
    )

    assert response.status_code == 400
    assert response.json() == {
        "status": "error",
        "message": "User with this email already exists",
    }


@pytest.mark.asyncio
async def test_register_missing_fields(client: AsyncClient):
    """Test that all missing fields are reported together."""
    response = await client.post(
        f"{API}/auth/register",
        json={"firstName": "John", "email": "john.doe@example.com"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "error"
    assert "Last name is required" in body["message"]
    assert "Password is required" in body["message"]


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient):
    response = await client.post(f"{API}/auth/register", json={**NEW_USER, "email": "invalid-email"})

    assert response.status_code == 400
    assert response.json()["message"] == "Please enter a valid email address"


@pytest.mark.asyncio
async def test_register_short_password(client: AsyncClient):
    response = await client.post(f"{API}/auth/register", json={**NEW_USER, "password": "123"})

    assert response.status_code == 400
    assert response.json()["message"] == "Password must be at least 6 characters long"


@pytest.mark.asyncio
async def test_register_then_login(client: AsyncClient, app: FastAPI):
    """Test that registered credentials can log in."""
    registered = await client.post(f"{API}/auth/register", json=NEW_USER)
    user_id = registered.json()["data"]["user"]["id"]

    response = await client.post(
        f"{API}/auth/login",
        json={"email": "john.doe@example.com", "password": PASSWORD},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["data"]["user"]["id"] == user_id
    assert "password" not in body["data"]["user"]
    assert app.state.token_issuer.verify(body["data"]["token"]) == user_id


@pytest.mark.asyncio
async def test_login_email_is_case_insensitive(client: AsyncClient, regular_user: User):
    response = await client.post(
        f"{API}/auth/login",
        json={"email": "USER@example.com", "password": PASSWORD},
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_email_match(client: AsyncClient, regular_user: User):
    """Test both login failures return the identical generic message."""
    wrong_password = await client.post(
        f"{API}/auth/login",
        json={"email": "user@example.com", "password": "wrongpassword"},
    )
    unknown_email = await client.post(
        f"{API}/auth/login",
        json={"email": "nobody@example.com", "password": PASSWORD},
    )

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {
        "status": "error",
        "message": "Invalid email or password",
    }


@pytest.mark.asyncio
async def test_login_missing_password(client: AsyncClient):
    response = await client.post(f"{API}/auth/login", json={"email": "user@example.com"})

    assert response.status_code == 400
    assert response.json()["message"] == "Password is required"


@pytest.mark.asyncio
async def test_get_profile(client: AsyncClient, user_token: str):
    """Test getting current user info."""
    response = await client.get(f"{API}/auth/profile", headers=auth(user_token))

    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["email"] == "user@example.com"
    assert user["department"] == "Engineering"
    assert "password" not in user


@pytest.mark.asyncio
async def test_access_without_token(client: AsyncClient):
    """Test accessing protected route without token."""
    response = await client.get(f"{API}/auth/profile")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json()["message"] == "Access denied. No token provided or invalid format."


@pytest.mark.asyncio
async def test_access_with_non_bearer_scheme(client: AsyncClient, user_token: str):
    response = await client.get(
        f"{API}/auth/profile",
        headers={"Authorization": f"Token {user_token}"},
    )

    assert response.status_code == 401
    assert response.json()["message"] == "Access denied. No token provided or invalid format."


@pytest.mark.asyncio
async def test_access_with_invalid_token(client: AsyncClient):
    """Test accessing protected route with invalid token."""
    response = await client.get(f"{API}/auth/profile", headers=auth("invalid-token"))

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token."


@pytest.mark.asyncio
async def test_access_with_foreign_signature(client: AsyncClient, regular_user: User):
    forged = JWTTokenIssuer("another-secret").issue(regular_user.id)

    response = await client.get(f"{API}/auth/profile", headers=auth(forged))

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token."


@pytest.mark.asyncio
async def test_access_with_expired_token(client: AsyncClient, app: FastAPI, regular_user: User):
    expired = app.state.token_issuer.issue(regular_user.id, expires_delta=timedelta(seconds=-10))

    response = await client.get(f"{API}/auth/profile", headers=auth(expired))

    assert response.status_code == 401
    assert response.json()["message"] == "Token has expired."


@pytest.mark.asyncio
async def test_access_after_account_deleted(
    client: AsyncClient, admin_token: str, user_token: str, regular_user: User
):
    """Test a valid token for a deleted account is rejected."""
    deleted = await client.delete(f"{API}/users/{regular_user.id}", headers=auth(admin_token))
    assert deleted.status_code == 200

    response = await client.get(f"{API}/auth/profile", headers=auth(user_token))

    assert response.status_code == 401
    assert response.json()["message"] == "Token is valid but user not found."


@pytest.mark.asyncio
async def test_refresh_token(client: AsyncClient, app: FastAPI, user_token: str, regular_user: User):
    """Test refreshing issues a new token and keeps the old one usable."""
    response = await client.post(f"{API}/auth/refresh", headers=auth(user_token))

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Token refreshed successfully"
    new_token = body["data"]["token"]
    assert new_token != user_token
    assert app.state.token_issuer.verify(new_token) == regular_user.id

    old = await client.get(f"{API}/auth/profile", headers=auth(user_token))
    assert old.status_code == 200


@pytest.mark.asyncio
async def test_refresh_requires_token(client: AsyncClient):
    response = await client.post(f"{API}/auth/refresh")

    assert response.status_code == 401
