"""User roles."""

from enum import Enum


class UserRole(str, Enum):
    """Roles a user can hold. Only ADMIN may use the back-office."""

    ADMIN = "ADMIN"
    REGULAR = "REGULAR"
