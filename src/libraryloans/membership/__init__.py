"""Library membership module."""

from .manager import MembershipManager
from .models import User
from .schemas import UserCreate, UserResponse

__all__ = [
    "MembershipManager",
    "User",
    "UserCreate",
    "UserResponse",
]
