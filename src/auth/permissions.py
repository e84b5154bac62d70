"""Roles and the capabilities they grant.

Roles are flat: a capability is granted to an explicit set of roles, not
inherited through a hierarchy.
"""

from enum import Enum


class UserRole(str, Enum):
    """Organisation roles carried in the access token."""

    SUPER_ADMIN = "SUPER_ADMIN"
    HR_ADMIN = "HR_ADMIN"
    MENTOR = "MENTOR"
    LEADER = "LEADER"
    EMPLOYEE = "EMPLOYEE"


class Capability(str, Enum):
    """Privileged actions guarded by a role check."""

    GRADE_ESSAYS = "grade_essays"
    MANAGE_CERTIFICATES = "manage_certificates"


CAPABILITY_ROLES: dict[Capability, frozenset[UserRole]] = {
    Capability.GRADE_ESSAYS: frozenset(
        {UserRole.SUPER_ADMIN, UserRole.HR_ADMIN, UserRole.MENTOR}
    ),
    Capability.MANAGE_CERTIFICATES: frozenset(
        {UserRole.SUPER_ADMIN, UserRole.HR_ADMIN}
    ),
}


def parse_role(role: UserRole | str | None) -> UserRole | None:
    """Parse a role claim, returning None for unknown values."""
    if role is None or isinstance(role, UserRole):
        return role
    try:
        return UserRole(role.upper())
    except ValueError:
        return None


def has_capability(role: UserRole | str | None, capability: Capability) -> bool:
    """Check whether ``role`` is granted ``capability``.

    Examples:
        >>> has_capability(UserRole.MENTOR, Capability.GRADE_ESSAYS)
        True
        >>> has_capability("EMPLOYEE", Capability.GRADE_ESSAYS)
        False
        >>> has_capability("MENTOR", Capability.MANAGE_CERTIFICATES)
        False
    """
    parsed = parse_role(role)
    if parsed is None:
        return False
    return parsed in CAPABILITY_ROLES[capability]
