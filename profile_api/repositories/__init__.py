from .user import UserRepository, normalize_email

__all__ = ["UserRepository", "normalize_email"]
