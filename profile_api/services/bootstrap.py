"""
First-run provisioning of the default admin account.
"""

import logging
from typing import Optional

from profile_api.core.config import Settings
from profile_api.models.user import User, UserRole
from profile_api.repositories.user import UserRepository

logger = logging.getLogger(__name__)


async def create_default_admin(users: UserRepository, settings: Settings) -> Optional[User]:
    """
    Create the default admin unless an admin already exists.

    Args:
        users: User repository bound to an open session.
        settings: Source of the ``default_admin_*`` values.

    Returns:
        User | None: The new admin, or None when one already existed.
    """
    existing = await users.find_admin()
    if existing is not None:
        logger.info(f"Admin user already exists: {existing.email}")
        return None

    admin = await users.create(
        {
            "first_name": settings.default_admin_first_name,
            "last_name": settings.default_admin_last_name,
            "email": settings.default_admin_email,
            "password": settings.default_admin_password,
            "department": settings.default_admin_department,
            "role": UserRole.ADMIN,
        }
    )
    logger.info(f"Created default admin {admin.id} ({admin.email})")
    return admin
