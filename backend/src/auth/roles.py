"""User roles for the KYC service.

- SELLER: Submits and tracks their own KYC record
- ADMIN: Reviews every seller's record (approve, reject, edit, delete)
"""

from enum import Enum


class UserRole(str, Enum):
    """Values of the `role` token claim."""
    SELLER = "seller"
    ADMIN = "admin"


# Admins may call seller endpoints (e.g. to look at requirements); sellers
# may never call admin endpoints.
ROLE_HIERARCHY = {
    UserRole.ADMIN: {UserRole.ADMIN, UserRole.SELLER},
    UserRole.SELLER: {UserRole.SELLER},
}


def has_permission(user_role: UserRole, required_role: UserRole) -> bool:
    """Check if a role satisfies the role an endpoint requires.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.SELLER)
        True
        >>> has_permission(UserRole.SELLER, UserRole.ADMIN)
        False
    """
    return required_role in ROLE_HIERARCHY.get(user_role, set())
