"""
User management endpoints.

Listing, creation and deletion are admin-only; reading and updating a
profile is allowed for its owner or any admin.
"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, status

from profile_api.api.deps import AdminUser, AppSettings, SelfOrAdminUser, Users
from profile_api.api.responses import ApiResponse, UserData
from profile_api.api.validation import UserCreateRequest, UserUpdateRequest
from profile_api.core.config import Settings
from profile_api.core.exceptions import (
    ConflictError,
    NotFoundError,
    SelfDeleteError,
    ValidationError,
)
from profile_api.models.user import UserPage, UserRead, UserRole
from profile_api.repositories.user import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter()

# Largest row offset the store accepts (signed 64-bit)
MAX_OFFSET = 2**63 - 1


def parse_role(value: Optional[str]) -> Optional[UserRole]:
    """Map a role string to ``UserRole``; anything unrecognized is None."""
    try:
        return UserRole(value) if value else None
    except ValueError:
        return None


def parse_positive_int(value: Optional[str], default: int) -> int:
    """
    Lenient query parsing: missing, non-numeric or non-positive values fall
    back to ``default``.
    """
    try:
        number = int(value) if value is not None else default
    except ValueError:
        return default
    return number if number > 0 else default


async def build_page(
    users: UserRepository,
    settings: Settings,
    page: Optional[str],
    limit: Optional[str],
    role: Optional[UserRole],
) -> UserPage:
    page_number = parse_positive_int(page, 1)
    page_size = min(parse_positive_int(limit, settings.default_page_size), settings.max_page_size)
    if (page_number - 1) * page_size > MAX_OFFSET:
        page_number = 1

    items, total = await users.paginate(page=page_number, limit=page_size, role=role)
    total_pages = math.ceil(total / page_size)

    return UserPage(
        users=[UserRead.model_validate(user) for user in items],
        total_users=total,
        total_pages=total_pages,
        current_page=page_number,
        has_next_page=page_number < total_pages,
        has_prev_page=page_number > 1,
    )


@router.get(
    "",
    response_model=ApiResponse[UserPage],
    response_model_exclude_none=True,
)
async def list_users(
    current_user: AdminUser,
    users: Users,
    settings: AppSettings,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    role: Optional[str] = None,
):
    """
    List users newest first, optionally filtered by role.

    Unrecognized role values are ignored rather than rejected.
    """
    result = await build_page(users, settings, page, limit, parse_role(role))
    return ApiResponse(data=result)


@router.get(
    "/role/{role}",
    response_model=ApiResponse[UserPage],
    response_model_exclude_none=True,
)
async def list_users_by_role(
    role: str,
    current_user: AdminUser,
    users: Users,
    settings: AppSettings,
    page: Optional[str] = None,
    limit: Optional[str] = None,
):
    """
    List users having the given role.

    Raises:
        ValidationError: If the role is not admin or user.
    """
    user_role = parse_role(role)
    if user_role is None:
        raise ValidationError(message="Invalid role. Must be either admin or user")

    result = await build_page(users, settings, page, limit, user_role)
    return ApiResponse(data=result)


@router.post(
    "",
    response_model=ApiResponse[UserData],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(user_in: UserCreateRequest, current_user: AdminUser, users: Users):
    """
    Create a user account on behalf of an admin.

    Raises:
        ConflictError: If email already registered.
    """
    if await users.email_exists(user_in.email):
        raise ConflictError("User with this email already exists")

    user = await users.create(user_in.model_dump())
    logger.info(f"Admin {current_user.id} created user {user.id}")

    return ApiResponse(
        message="User created successfully",
        data=UserData(user=UserRead.model_validate(user)),
    )


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserData],
    response_model_exclude_none=True,
)
async def get_user(user_id: str, current_user: SelfOrAdminUser, users: Users):
    """
    Get a single user.

    Raises:
        NotFoundError: If the user does not exist.
    """
    user = await users.get(user_id)
    if user is None:
        raise NotFoundError()
    return ApiResponse(data=UserData(user=UserRead.model_validate(user)))


@router.put(
    "/{user_id}",
    response_model=ApiResponse[UserData],
    response_model_exclude_none=True,
)
async def update_user(
    user_id: str,
    user_in: UserUpdateRequest,
    current_user: SelfOrAdminUser,
    users: Users,
):
    """
    Partially update a user.

    A role sent by a non-admin is dropped and the rest of the update applied.

    Raises:
        NotFoundError: If the user does not exist.
        ConflictError: If the new email belongs to another user.
    """
    changes = user_in.changes()
    if not current_user.is_admin:
        changes.pop("role", None)

    user = await users.get(user_id)
    if user is None:
        raise NotFoundError()

    if changes.get("email") and await users.email_exists(changes["email"], exclude_id=user.id):
        raise ConflictError("Email already exists")

    user = await users.update(user, changes)
    logger.info(f"User {user.id} updated by {current_user.id}: {sorted(changes)}")

    return ApiResponse(
        message="User updated successfully",
        data=UserData(user=UserRead.model_validate(user)),
    )


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
)
async def delete_user(user_id: str, current_user: AdminUser, users: Users):
    """
    Delete a user.

    Raises:
        SelfDeleteError: If an admin targets their own account.
        NotFoundError: If the user does not exist.
    """
    if user_id == current_user.id:
        raise SelfDeleteError()

    user = await users.get(user_id)
    if user is None:
        raise NotFoundError()

    await users.delete(user)
    logger.info(f"Admin {current_user.id} deleted user {user_id}")

    return ApiResponse(message="User deleted successfully")
