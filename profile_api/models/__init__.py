"""
Database models using SQLModel.
"""

from .user import User, UserPage, UserRead, UserRole

__all__ = [
    "User",
    "UserPage",
    "UserRead",
    "UserRole",
]
