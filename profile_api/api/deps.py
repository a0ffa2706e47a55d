"""
API Dependencies.

Shared dependencies for authentication, authorization, database sessions
and the security primitives.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from profile_api.core.config import Settings
from profile_api.core.database import get_db
from profile_api.core.exceptions import (
    AdminRequiredError,
    MissingTokenError,
    ProfileAccessDeniedError,
    StaleUserError,
)
from profile_api.core.security import PasswordHasher, TokenIssuer
from profile_api.models.user import User
from profile_api.repositories.user import UserRepository

# Bearer scheme; errors are raised by get_current_user with our own messages
bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_user_repository(
    db: Annotated[AsyncSession, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> UserRepository:
    return UserRepository(db, hasher)


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> User:
    """
    Dependency to get the current authenticated user.

    Args:
        credentials: Parsed ``Authorization: Bearer <token>`` header.
        issuer: Token issuer used to verify the token.
        users: User repository.

    Returns:
        User: The authenticated user.

    Raises:
        MissingTokenError: Header absent or not a bearer token.
        InvalidTokenError: Bad signature or malformed token.
        TokenExpiredError: Token is past its expiry.
        StaleUserError: Token is valid but the account no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()

    user_id = issuer.verify(credentials.credentials)

    user = await users.get(user_id)
    if user is None:
        raise StaleUserError()

    return user


async def require_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Dependency to ensure current user is an admin.

    Raises:
        AdminRequiredError: If user is not an admin.
    """
    if not current_user.is_admin:
        raise AdminRequiredError()
    return current_user


async def require_self_or_admin(
    user_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Dependency allowing admins, or the owner of the ``user_id`` path target.

    Raises:
        ProfileAccessDeniedError: Non-admin targeting someone else's id.
    """
    if current_user.is_admin or current_user.id == user_id:
        return current_user
    raise ProfileAccessDeniedError()


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
SelfOrAdminUser = Annotated[User, Depends(require_self_or_admin)]
Users = Annotated[UserRepository, Depends(get_user_repository)]
Issuer = Annotated[TokenIssuer, Depends(get_token_issuer)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
