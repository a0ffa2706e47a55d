"""Response envelopes: ``{status, message?, data?}``."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from profile_api.models.user import CamelModel, UserRead

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    status: str = "success"
    message: Optional[str] = None
    data: Optional[T] = None


class UserData(CamelModel):
    user: UserRead


class AuthData(CamelModel):
    user: UserRead
    token: str


class TokenData(CamelModel):
    token: str
