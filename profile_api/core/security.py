"""
Security utilities for authentication.

Provides password hashing and JWT session tokens behind two small
interfaces, ``PasswordHasher`` and ``TokenIssuer``.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .config import Settings
from .exceptions import InvalidTokenError, TokenExpiredError


class PasswordHasher(ABC):
    """One-way password hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Hash a plain text password for storage."""

    @abstractmethod
    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Check a plain text password against a stored hash."""


class BcryptPasswordHasher(PasswordHasher):
    """
    Bcrypt hashing via passlib.

    Args:
        rounds: Adaptive cost factor (log2 of the iteration count).
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """
        Hash a password for storage.

        Args:
            password: Plain text password to hash.

        Returns:
            str: Hashed password.
        """
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: The plain text password to verify.
            hashed_password: The hashed password to compare against.

        Returns:
            bool: True if password matches, False otherwise.
        """
        if not plain_password or not hashed_password:
            return False
        try:
            return self._context.verify(plain_password, hashed_password)
        except ValueError:
            # Unrecognized or malformed hash
            return False


class TokenIssuer(ABC):
    """Signs and verifies bearer tokens bound to a user id."""

    @abstractmethod
    def issue(self, user_id: str) -> str:
        """Create a token for ``user_id``."""

    @abstractmethod
    def verify(self, token: str) -> str:
        """
        Return the user id bound to ``token``.

        Raises:
            InvalidTokenError: Malformed token or bad signature.
            TokenExpiredError: Token is past its expiry.
        """


class JWTTokenIssuer(TokenIssuer):
    """
    HMAC-signed JWTs with an expiry claim.

    Args:
        secret_key: Signing secret.
        algorithm: JWS algorithm, HS256 by default.
        expires_delta: Lifetime of issued tokens.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(days=7),
    ):
        if not secret_key:
            raise ValueError("JWT secret key must not be blank")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def issue(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a JWT access token.

        Args:
            user_id: Identifier stored in the ``sub`` claim.
            expires_delta: Optional custom expiration time.

        Returns:
            str: Encoded JWT token.
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else self.expires_delta)

        payload: dict[str, Any] = {
            "sub": str(user_id),
            "iat": now,
            "exp": expire,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        if not token:
            raise InvalidTokenError()

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError:
            raise InvalidTokenError()

        user_id = payload.get("sub")
        if not user_id:
            raise InvalidTokenError()
        return str(user_id)


def build_password_hasher(settings: Settings) -> PasswordHasher:
    return BcryptPasswordHasher(rounds=settings.bcrypt_rounds)


def build_token_issuer(settings: Settings) -> TokenIssuer:
    return JWTTokenIssuer(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )
