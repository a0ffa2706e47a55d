"""
User model for authentication and authorization.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp, the form the store columns accept."""
    return datetime.now(timezone.utc)


def new_user_id() -> str:
    return uuid.uuid4().hex


def join_full_name(first_name: str, middle_name: Optional[str], last_name: str) -> str:
    """Space-join the name parts, skipping an empty middle name."""
    parts = [first_name, middle_name, last_name] if middle_name else [first_name, last_name]
    return " ".join(parts)


class UserRole(str, Enum):
    """User role enumeration."""
    ADMIN = "admin"
    USER = "user"


class User(SQLModel, table=True):
    """
    User database model.

    Attributes:
        id: Opaque primary key.
        first_name: Given name.
        middle_name: Optional middle name.
        last_name: Family name.
        email: Unique, lowercased email address.
        hashed_password: Bcrypt hashed password.
        department: Optional department.
        role: User role (admin or user).
        created_at: Account creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "users"

    id: str = Field(default_factory=new_user_id, primary_key=True, max_length=32)
    first_name: str = Field(max_length=50)
    middle_name: Optional[str] = Field(default=None, max_length=50)
    last_name: str = Field(max_length=50)
    email: str = Field(unique=True, index=True, max_length=254)
    hashed_password: str
    department: Optional[str] = Field(default=None, max_length=100)
    role: UserRole = Field(default=UserRole.USER, index=True)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def full_name(self) -> str:
        return join_full_name(self.first_name, self.middle_name, self.last_name)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class CamelModel(BaseModel):
    """Base for API payloads serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserRead(CamelModel):
    """Public profile: every user field except the password."""

    id: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    email: str
    department: Optional[str] = None
    role: UserRole
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="fullName")  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        return join_full_name(self.first_name, self.middle_name, self.last_name)


class UserPage(CamelModel):
    """One page of users plus paging metadata."""

    users: list[UserRead]
    total_users: int
    total_pages: int
    current_page: int
    has_next_page: bool
    has_prev_page: bool
