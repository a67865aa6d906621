"""Caller roles and ownership checks.

The authentication provider supplies the caller's identity and role with
every request. Operations receive both explicitly and never read them from
ambient state.
"""

from enum import Enum

from marketplace.shared.errors import UnauthorizedError


class Role(Enum):
    BUYER = "buyer"
    SELLER = "seller"
    LOGISTICS = "logistics"
    ADMIN = "admin"


def is_admin(role: str | None) -> bool:
    return role == Role.ADMIN.value


def assert_owner(owner_id: str, caller_id: str, caller_role: str | None, message: str) -> None:
    """Raise ``UnauthorizedError`` unless the caller owns the resource or is an admin."""
    if is_admin(caller_role):
        return
    if str(owner_id) != str(caller_id):
        raise UnauthorizedError(message)


def assert_role(caller_role: str | None, allowed: set[Role], message: str) -> None:
    """Raise ``UnauthorizedError`` unless the caller holds one of the allowed roles (admins always pass)."""
    if is_admin(caller_role):
        return
    if caller_role not in {role.value for role in allowed}:
        raise UnauthorizedError(message)
