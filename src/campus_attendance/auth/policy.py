from __future__ import annotations

from enum import Enum

from ..core.enums import Role
from ..core.exceptions import AuthorizationError


class Capability(str, Enum):
    MANAGE_SESSIONS = "manage_sessions"
    MARK_ATTENDANCE = "mark_attendance"
    VIEW_STATISTICS = "view_statistics"
    OVERRIDE_OWNERSHIP = "override_ownership"


class StatisticsScope(str, Enum):
    OWN_RECORDS = "own_records"
    OWN_COURSES = "own_courses"
    ALL = "all"


_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.STUDENT: frozenset({Capability.MARK_ATTENDANCE, Capability.VIEW_STATISTICS}),
    Role.FACULTY: frozenset({Capability.MANAGE_SESSIONS, Capability.VIEW_STATISTICS}),
    Role.ADMIN: frozenset(
        {Capability.MANAGE_SESSIONS, Capability.VIEW_STATISTICS, Capability.OVERRIDE_OWNERSHIP}
    ),
    Role.STAFF: frozenset({Capability.VIEW_STATISTICS}),
}

_STATISTICS_SCOPE: dict[Role, StatisticsScope] = {
    Role.STUDENT: StatisticsScope.OWN_RECORDS,
    Role.FACULTY: StatisticsScope.OWN_COURSES,
    Role.ADMIN: StatisticsScope.ALL,
    Role.STAFF: StatisticsScope.ALL,
}

# Every role must be covered by both tables.
if set(_CAPABILITIES) != set(Role):
    raise RuntimeError("capability table is missing a role")
if set(_STATISTICS_SCOPE) != set(Role):
    raise RuntimeError("statistics scope table is missing a role")


def has_capability(role: Role, capability: Capability) -> bool:
    return capability in _CAPABILITIES[role]


def require_capability(role: Role, capability: Capability) -> None:
    if not has_capability(role, capability):
        raise AuthorizationError("Access denied. Insufficient permissions.")


def can_act_for_owner(*, role: Role, actor_id: str, owner_id: str) -> bool:
    """Owners act on their own resources; roles with the override capability act on any."""
    return actor_id == owner_id or has_capability(role, Capability.OVERRIDE_OWNERSHIP)


def statistics_scope(role: Role) -> StatisticsScope:
    return _STATISTICS_SCOPE[role]
