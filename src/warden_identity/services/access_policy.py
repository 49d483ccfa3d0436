"""Policy-based authorization over a static permission catalog.

Permissions are data: each role maps to a fixed tuple of
``Permission(action, resource, conditions)`` entries, declared once and
frozen. Every check is a pure function of the principal and the request,
so the policy can be shared across concurrent callers without locking.

Condition keys understood by ``has_permission``:

- ``owner: "self"``      - the request's ``owner`` must be the principal id
- ``assignedTo: "self"`` - the request's ``assignedTo`` must be the principal id
- ``status: <value>``    - the request's ``status`` must equal the value
- anything else          - strict equality with the request's value

All conditions of an entry must hold. A missing request value never
satisfies a condition.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from warden_identity.application.context import Principal
from warden_identity.domain.user import ROLE_HIERARCHY, UserRole
from warden_identity.exceptions import InsufficientPermissionsError

logger = logging.getLogger(__name__)

SELF = "self"
_SELF_CONDITIONS = ("owner", "assignedTo")


@dataclass(frozen=True)
class Permission:
    """An action on a resource type, optionally guarded by conditions.

    Used both for catalog entries and for the permission being requested;
    in a request, ``conditions`` carries the runtime facts (owner id,
    assignee id, status, ...).
    """

    action: str
    resource: str
    conditions: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.conditions is not None:
            object.__setattr__(
                self, "conditions", MappingProxyType(dict(self.conditions))
            )

    def __hash__(self) -> int:
        conditions = tuple(sorted((self.conditions or {}).items()))
        return hash((self.action, self.resource, conditions))


@dataclass(frozen=True)
class Resource:
    """A concrete resource being accessed."""

    type: str
    id: str | None = None
    owner_id: str | None = None


def _p(action: str, resource: str, **conditions: Any) -> Permission:
    return Permission(action, resource, conditions or None)


DEFAULT_PERMISSION_CATALOG: Mapping[UserRole, tuple[Permission, ...]] = MappingProxyType(
    {
        UserRole.ADMIN: (
            _p("create", "product"),
            _p("update", "product"),
            _p("delete", "product"),
            _p("read", "product"),
            _p("create", "promo"),
            _p("update", "promo"),
            _p("delete", "promo"),
            _p("read", "promo"),
            _p("read", "order"),
            _p("update", "order"),
            _p("read", "user"),
            _p("update", "user"),
            _p("read", "analytics"),
        ),
        UserRole.STAFF: (
            _p("read", "product"),
            _p("read", "order"),
            _p("update", "order"),
            _p("read", "promo"),
        ),
        UserRole.RIDER: (
            _p("read", "product"),
            _p("read", "order", status="assigned"),
            _p("update", "order", assignedTo=SELF),
        ),
        UserRole.CUSTOMER: (
            _p("read", "product"),
            _p("create", "order"),
            _p("read", "order", owner=SELF),
            _p("update", "order", owner=SELF, status="pending"),
            _p("create", "review"),
            _p("read", "review"),
            _p("update", "review", owner=SELF),
            _p("delete", "review", owner=SELF),
            _p("read", "cart", owner=SELF),
            _p("update", "cart", owner=SELF),
            _p("read", "loyalty", owner=SELF),
        ),
    }
)


class AccessPolicy:
    """Evaluates what a principal may do.

    Parameters
    ----------
    catalog
        Role to permissions table. Copied and frozen on construction.
    hierarchy
        Role to the set of roles it subsumes (reflexive, acyclic).
    """

    def __init__(
        self,
        catalog: Mapping[UserRole, Iterable[Permission]] = DEFAULT_PERMISSION_CATALOG,
        hierarchy: Mapping[UserRole, frozenset[UserRole]] = ROLE_HIERARCHY,
    ):
        self._catalog: Mapping[UserRole, tuple[Permission, ...]] = MappingProxyType(
            {role: tuple(permissions) for role, permissions in catalog.items()}
        )
        self._hierarchy = hierarchy

    def has_permission(self, principal: Principal, permission: Permission) -> bool:
        """Check whether the principal's role grants the requested permission."""
        for entry in self.get_permissions_for_role(principal.role):
            if entry.action != permission.action or entry.resource != permission.resource:
                continue
            if not entry.conditions:
                return True
            if self._conditions_hold(principal, entry.conditions, permission.conditions):
                return True
        return False

    def has_role(self, principal: Principal, role: UserRole) -> bool:
        return principal.role == role

    def has_any_role(self, principal: Principal, roles: Iterable[UserRole]) -> bool:
        return principal.role in set(roles)

    def has_role_or_higher(self, principal: Principal, minimum_role: UserRole) -> bool:
        """True iff minimum_role is within the principal role's hierarchy expansion."""
        return minimum_role in self._hierarchy.get(principal.role, frozenset())

    def can_access_resource(self, principal: Principal, resource: Resource) -> bool:
        """Check read access to a concrete resource.

        Ownership is enforced even when the caller passes no conditions:
        a principal whose read entry for the type is owner-scoped cannot
        read a resource owned by someone else.
        """
        if not self._grants_action(principal.role, "read", resource.type):
            return False

        if resource.owner_id is not None and resource.owner_id != principal.id:
            entry = self._find_entry(principal.role, "read", resource.type)
            if entry is not None and entry.conditions and entry.conditions.get("owner") == SELF:
                return False

        return True

    def can_assign_role(self, principal: Principal, target_role: UserRole) -> bool:
        """Only admins assign roles, and only roles they themselves subsume."""
        if principal.role != UserRole.ADMIN:
            return False
        return self.has_role_or_higher(principal, target_role)

    def get_accessible_actions(self, principal: Principal, resource_type: str) -> list[str]:
        """Actions the principal's role has any catalog entry for on a resource type."""
        actions: list[str] = []
        for entry in self.get_permissions_for_role(principal.role):
            if entry.resource == resource_type and entry.action not in actions:
                actions.append(entry.action)
        return actions

    def get_permissions_for_role(self, role: UserRole) -> tuple[Permission, ...]:
        return self._catalog.get(role, ())

    def ensure_permission(self, principal: Principal, permission: Permission) -> None:
        """Raise InsufficientPermissionsError unless ``has_permission`` allows it."""
        if not self.has_permission(principal, permission):
            logger.info(
                "Denied %s on %s for user %s (role: %s)",
                permission.action,
                permission.resource,
                principal.id,
                principal.role.value,
            )
            raise InsufficientPermissionsError(
                f"Insufficient permissions for {permission.action} on {permission.resource}"
            )

    def _grants_action(self, role: UserRole, action: str, resource_type: str) -> bool:
        return self._find_entry(role, action, resource_type) is not None

    def _find_entry(self, role: UserRole, action: str, resource_type: str) -> Permission | None:
        for entry in self.get_permissions_for_role(role):
            if entry.action == action and entry.resource == resource_type:
                return entry
        return None

    @staticmethod
    def _conditions_hold(
        principal: Principal,
        required: Mapping[str, Any],
        supplied: Mapping[str, Any] | None,
    ) -> bool:
        supplied = supplied or {}
        for key, expected in required.items():
            if key not in supplied:
                return False
            if key in _SELF_CONDITIONS and expected == SELF:
                if supplied[key] != principal.id:
                    return False
            elif supplied[key] != expected:
                return False
        return True
