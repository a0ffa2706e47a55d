"""
Request body validation.

Pydantic schemas for every mutating endpoint, plus the formatter that turns
pydantic's error list into the human-readable messages the API returns.
FastAPI validates the body before the route handler runs, so an invalid
request never reaches the handler or the store.
"""

import re
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from profile_api.models.user import UserRole

EMAIL_PATTERN = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$")

NAME_MAX_LENGTH = 50
DEPARTMENT_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6

FIELD_LABELS = {
    "first_name": "First name",
    "middle_name": "Middle name",
    "last_name": "Last name",
    "email": "Email",
    "password": "Password",
    "department": "Department",
    "role": "Role",
}

ROLE_MESSAGE = "Role must be either admin or user"
EMAIL_MESSAGE = "Please enter a valid email address"
PASSWORD_LENGTH_MESSAGE = f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"


def _label(field: Any) -> str:
    if not isinstance(field, str):
        return "Value"
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", field).lower()
    return FIELD_LABELS.get(snake, field)


def _fail(error_type: str, message: str) -> PydanticCustomError:
    return PydanticCustomError(error_type, message)


def _bounded_text(
    value: Optional[str],
    field_name: str,
    max_length: int,
    *,
    required: bool,
    empty_message: str,
) -> Optional[str]:
    label = FIELD_LABELS[field_name]
    if value is None:
        if required:
            raise _fail("string_empty", empty_message.format(label=label))
        return None
    value = value.strip()
    if required and not value:
        raise _fail("string_empty", empty_message.format(label=label))
    if len(value) > max_length:
        raise _fail("string_too_long", f"{label} cannot exceed {max_length} characters")
    return value


def _normalized_email(value: Optional[str], empty_message: str) -> str:
    if value is None or not value.strip():
        raise _fail("string_empty", empty_message)
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise _fail("email_invalid", EMAIL_MESSAGE)
    return value


def _checked_password(value: Optional[str], empty_message: str) -> str:
    if value is None or value == "":
        raise _fail("string_empty", empty_message)
    if len(value) < PASSWORD_MIN_LENGTH:
        raise _fail("string_too_short", PASSWORD_LENGTH_MESSAGE)
    return value


class RequestModel(BaseModel):
    """Request bodies use camelCase keys and reject unknown ones."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class UserCreateRequest(RequestModel):
    """Body for registration and admin user creation."""

    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    email: str
    password: str
    department: Optional[str] = None
    role: Optional[UserRole] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _validate_name(cls, value: str, info: ValidationInfo) -> str:
        return _bounded_text(
            value, info.field_name, NAME_MAX_LENGTH,
            required=True, empty_message="{label} is required",
        )

    @field_validator("middle_name")
    @classmethod
    def _validate_middle_name(cls, value: Optional[str]) -> Optional[str]:
        return _bounded_text(
            value, "middle_name", NAME_MAX_LENGTH,
            required=False, empty_message="",
        )

    @field_validator("department")
    @classmethod
    def _validate_department(cls, value: Optional[str]) -> Optional[str]:
        return _bounded_text(
            value, "department", DEPARTMENT_MAX_LENGTH,
            required=False, empty_message="",
        )

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _normalized_email(value, "Email is required")

    @field_validator("password")
    @classmethod
    def _validate_password(cls, value: str) -> str:
        return _checked_password(value, "Password is required")


class UserUpdateRequest(RequestModel):
    """Body for partial updates; only the keys sent are applied."""

    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    department: Optional[str] = None
    role: Optional[UserRole] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _validate_name(cls, value: Optional[str], info: ValidationInfo) -> str:
        return _bounded_text(
            value, info.field_name, NAME_MAX_LENGTH,
            required=True, empty_message="{label} cannot be empty",
        )

    @field_validator("middle_name")
    @classmethod
    def _validate_middle_name(cls, value: Optional[str]) -> Optional[str]:
        return _bounded_text(
            value, "middle_name", NAME_MAX_LENGTH,
            required=False, empty_message="",
        )

    @field_validator("department")
    @classmethod
    def _validate_department(cls, value: Optional[str]) -> Optional[str]:
        return _bounded_text(
            value, "department", DEPARTMENT_MAX_LENGTH,
            required=False, empty_message="",
        )

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: Optional[str]) -> str:
        return _normalized_email(value, EMAIL_MESSAGE)

    @field_validator("password")
    @classmethod
    def _validate_password(cls, value: Optional[str]) -> str:
        return _checked_password(value, PASSWORD_LENGTH_MESSAGE)

    @field_validator("role")
    @classmethod
    def _validate_role(cls, value: Optional[UserRole]) -> UserRole:
        if value is None:
            raise _fail("enum", ROLE_MESSAGE)
        return value

    def changes(self) -> dict[str, Any]:
        """Fields explicitly present in the request, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class LoginRequest(RequestModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _normalized_email(value, "Email is required")

    @field_validator("password")
    @classmethod
    def _validate_password(cls, value: str) -> str:
        if not value:
            raise _fail("string_empty", "Password is required")
        return value


def format_validation_errors(errors: Iterable[dict[str, Any]]) -> list[str]:
    """
    Turn pydantic/FastAPI error dicts into unique, ordered messages.
    """
    messages: list[str] = []
    for error in errors:
        error_type = error.get("type", "")
        loc = tuple(error.get("loc") or ())
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        field = loc[-1] if loc else None

        if error_type == "missing":
            message = f"{_label(field)} is required" if field else "Request body is required"
        elif error_type == "extra_forbidden":
            message = f'"{field}" is not allowed'
        elif error_type == "enum":
            message = ROLE_MESSAGE
        elif error_type == "string_type":
            message = f"{_label(field)} must be a string"
        elif error_type in ("model_attributes_type", "dict_type", "model_type"):
            message = "Request body must be a JSON object"
        elif error_type == "json_invalid":
            message = "Request body is not valid JSON"
        else:
            message = error.get("msg", "Invalid value")

        if message not in messages:
            messages.append(message)
    return messages
