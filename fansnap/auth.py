"""
Authorization gate for the request layer.

The ledgers trust the identifiers they are given. Callers are resolved to an
explicit ``Caller`` before any core operation runs, and role or ownership is
checked here rather than inside the ledgers.
"""

from dataclasses import dataclass

from .errors import ForbiddenError
from .models import Role, User


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "Caller":
        return cls(user_id=user.id, role=user.role)


def require_role(caller: Caller, role: Role, message: str = "") -> None:
    if caller.role != role:
        raise ForbiddenError(message or f"Only {role.value}s can do this")


def require_admin(caller: Caller) -> None:
    require_role(caller, Role.ADMIN, "Admin only")


def require_self(caller: Caller, user_id: str, message: str = "Not authorised") -> None:
    if caller.user_id != user_id:
        raise ForbiddenError(message)
