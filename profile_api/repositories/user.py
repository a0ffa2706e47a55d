"""Repository for user records in the credential store."""

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, func, select

from profile_api.core.exceptions import ConflictError
from profile_api.core.security import PasswordHasher
from profile_api.models.user import User, UserRole, utcnow

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """
    CRUD, lookup and pagination over the ``users`` table.

    Passwords handed to ``create``/``update`` are plain text; they are hashed
    here whenever the password is set, and only the hash is persisted.
    """

    def __init__(self, db: AsyncSession, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    async def get(self, user_id: str) -> Optional[User]:
        """Find a user by id."""
        if not user_id:
            return None
        return await self.db.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by email, case-insensitively."""
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str, exclude_id: Optional[str] = None) -> bool:
        query = select(User.id).where(User.email == normalize_email(email))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        return result.first() is not None

    async def find_admin(self) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.role == UserRole.ADMIN).limit(1)
        )
        return result.scalar_one_or_none()

    async def create(self, data: dict[str, Any]) -> User:
        """
        Insert a new user.

        Args:
            data: Field values; ``password`` is the plain text password.

        Returns:
            User: The stored user.

        Raises:
            ConflictError: If the email is already taken.
        """
        fields = dict(data)
        password = fields.pop("password")
        fields["email"] = normalize_email(fields["email"])
        if fields.get("role") is None:
            fields["role"] = UserRole.USER

        user = User(**fields, hashed_password=self.hasher.hash(password))
        self.db.add(user)
        await self._commit(conflict_message="User with this email already exists")
        await self.db.refresh(user)
        return user

    async def update(self, user: User, changes: dict[str, Any]) -> User:
        """
        Apply a partial update to ``user``.

        Only the keys present in ``changes`` are written. The password is
        re-hashed only when it is part of the update.

        Raises:
            ConflictError: If the new email is already taken.
        """
        fields = dict(changes)
        if "password" in fields:
            user.hashed_password = self.hasher.hash(fields.pop("password"))
        if fields.get("email") is not None:
            fields["email"] = normalize_email(fields["email"])

        for key, value in fields.items():
            setattr(user, key, value)
        user.updated_at = utcnow()

        self.db.add(user)
        await self._commit(conflict_message="Email already exists")
        await self.db.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        await self.db.delete(user)
        await self.db.commit()

    async def paginate(
        self,
        page: int = 1,
        limit: int = 10,
        role: Optional[UserRole] = None,
    ) -> tuple[list[User], int]:
        """
        Return one page of users, newest first, plus the total count.

        Args:
            page: 1-based page number.
            limit: Page size.
            role: Optional role filter.
        """
        query = select(User)
        count_query = select(func.count()).select_from(User)
        if role is not None:
            query = query.where(User.role == role)
            count_query = count_query.where(User.role == role)

        query = (
            query.order_by(col(User.created_at).desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )

        users = list((await self.db.execute(query)).scalars().all())
        total = (await self.db.execute(count_query)).scalar_one()
        return users, total

    async def _commit(self, conflict_message: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning("Unique email constraint violated on write")
            raise ConflictError(conflict_message)
