# src/schedule_dashboard/auth/roles.py

"""
Roles and the one capability-policy table.

Deny-by-default: no session, an unknown role, or a disabled account never
gets access. Adding a Role member without a POLICY entry also denies.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .session import Session


class Role(StrEnum):
    ADMIN = "Admin"
    STAFF = "Staff"
    UNKNOWN = "Unknown"

    @classmethod
    def from_raw(cls, raw: str | None) -> Role:
        key = (raw or "").strip().lower()
        if key == "admin":
            return cls.ADMIN
        if key == "staff":
            return cls.STAFF
        return cls.UNKNOWN


class AccountStatus(StrEnum):
    ENABLED = "Enabled"
    DISABLED = "Disabled"

    @classmethod
    def from_raw(cls, raw: str | None) -> AccountStatus:
        return cls.ENABLED if (raw or "").strip().lower() == "enabled" else cls.DISABLED


HOME_ROUTES = frozenset({"/", "/home"})


@dataclass(frozen=True, slots=True)
class Capability:
    everything: bool = False
    routes: frozenset[str] = frozenset()

    def allows(self, route: str) -> bool:
        return self.everything or route in self.routes


POLICY: Mapping[Role, Capability] = {
    Role.ADMIN: Capability(everything=True),
    Role.STAFF: Capability(routes=HOME_ROUTES),
    Role.UNKNOWN: Capability(),
}


def normalize_route(route: str) -> str:
    route = (route or "").strip()
    if not route.startswith("/"):
        route = "/" + route
    return route.rstrip("/") or "/"


def can_access(session: Session | None, route: str) -> bool:
    if session is None:
        return False
    if session.status != AccountStatus.ENABLED:
        return False
    capability = POLICY.get(session.role)
    if capability is None:
        return False
    return capability.allows(normalize_route(route))


@dataclass(frozen=True, slots=True)
class NavItem:
    path: str
    label: str


NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem("/", "Home"),
    NavItem("/batch", "Batch Control"),
    NavItem("/master", "Manage Task Master"),
    NavItem("/users", "Manage Users"),
    NavItem("/api-test", "Test API"),
)


def navigation(session: Session | None) -> list[NavItem]:
    """Menu entries the session may open, in menu order."""
    return [item for item in NAV_ITEMS if can_access(session, item.path)]
