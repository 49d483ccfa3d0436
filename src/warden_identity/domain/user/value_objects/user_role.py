"""User roles and the role hierarchy.

The hierarchy is declared as direct edges ("admin outranks staff") and
expanded once, at import time, into a reflexive transitive closure. Lookups
at request time are plain frozenset membership tests.
"""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType


class UserRole(str, Enum):
    """Closed set of roles a principal can hold."""

    CUSTOMER = "customer"
    RIDER = "rider"
    STAFF = "staff"
    ADMIN = "admin"


DEFAULT_ROLE = UserRole.CUSTOMER

_DIRECT_SUBORDINATES: Mapping[UserRole, tuple[UserRole, ...]] = {
    UserRole.ADMIN: (UserRole.STAFF, UserRole.RIDER),
    UserRole.STAFF: (UserRole.CUSTOMER,),
    UserRole.RIDER: (UserRole.CUSTOMER,),
    UserRole.CUSTOMER: (),
}


def build_role_hierarchy(
    edges: Mapping[UserRole, tuple[UserRole, ...]],
) -> Mapping[UserRole, frozenset[UserRole]]:
    """Expand direct edges into the set of roles each role subsumes.

    Every role subsumes itself. Raises ValueError if the edges contain a
    cycle, since a cyclic hierarchy makes "role or higher" meaningless.
    """
    closure: dict[UserRole, frozenset[UserRole]] = {}

    def expand(role: UserRole, path: tuple[UserRole, ...]) -> frozenset[UserRole]:
        if role in path:
            chain = " -> ".join(r.value for r in (*path, role))
            msg = f"Role hierarchy contains a cycle: {chain}"
            raise ValueError(msg)
        if role in closure:
            return closure[role]

        subsumed = {role}
        for child in edges.get(role, ()):
            subsumed |= expand(child, (*path, role))
        closure[role] = frozenset(subsumed)
        return closure[role]

    for role in UserRole:
        expand(role, ())

    return MappingProxyType(closure)


ROLE_HIERARCHY = build_role_hierarchy(_DIRECT_SUBORDINATES)
