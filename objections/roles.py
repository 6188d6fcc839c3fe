"""
Caller roles carried in access tokens.
"""

from objections.errors import Forbidden

ROLE_FARMER = "farmer"
ROLE_ADMIN = "admin"


def require_role(actor_role: str, role: str) -> None:
    """Raise Forbidden unless actor_role matches role."""
    if actor_role != role:
        raise Forbidden(f"Requires {role} role")
