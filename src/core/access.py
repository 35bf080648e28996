"""Role capabilities.

Every route asks one question, ``can_perform(role, operation, scope)``, instead
of comparing role strings inline. A role reaches data through exactly one
scope: admins see everything, branch managers their branch, coordinators the
team of agents they log sales for.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Optional

from src.core.errors import BadRequestError, ForbiddenError


class Role(str, Enum):
    ADMIN = "admin"
    BRANCH_MANAGER = "branch_manager"
    COORDINATOR = "coordinator"
    AGENT = "agent"


class Scope(str, Enum):
    GLOBAL = "global"
    BRANCH = "branch"
    TEAM = "team"


class Operation(str, Enum):
    CREATE_SALES_RECORD = "create_sales_record"
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_REPORT = "view_report"
    VIEW_LEADERBOARD = "view_leaderboard"
    VIEW_TARGETS = "view_targets"
    VIEW_MANAGER_TARGETS_PAGE = "view_manager_targets_page"
    SET_BRANCH_TARGET = "set_branch_target"
    SET_COORDINATOR_TARGET = "set_coordinator_target"
    VIEW_INSIGHTS = "view_insights"


ROLE_SCOPES: Dict[Role, Scope] = {
    Role.ADMIN: Scope.GLOBAL,
    Role.BRANCH_MANAGER: Scope.BRANCH,
    Role.COORDINATOR: Scope.TEAM,
}

_ALL_ROLES: FrozenSet[Role] = frozenset(Role)
_SCOPED_ROLES: FrozenSet[Role] = frozenset(ROLE_SCOPES)

CAPABILITIES: Dict[Operation, FrozenSet[Role]] = {
    Operation.CREATE_SALES_RECORD: frozenset({Role.COORDINATOR}),
    Operation.VIEW_DASHBOARD: _SCOPED_ROLES,
    Operation.VIEW_REPORT: _SCOPED_ROLES,
    Operation.VIEW_LEADERBOARD: _ALL_ROLES,
    Operation.VIEW_TARGETS: _SCOPED_ROLES,
    Operation.VIEW_MANAGER_TARGETS_PAGE: frozenset({Role.BRANCH_MANAGER}),
    Operation.SET_BRANCH_TARGET: frozenset({Role.ADMIN}),
    Operation.SET_COORDINATOR_TARGET: frozenset({Role.BRANCH_MANAGER}),
    Operation.VIEW_INSIGHTS: frozenset({Role.ADMIN}),
}


def scope_for_role(role: Role) -> Optional[Scope]:
    return ROLE_SCOPES.get(role)


def can_perform(role: Role, operation: Operation, scope: Optional[Scope] = None) -> bool:
    if role not in CAPABILITIES.get(operation, frozenset()):
        return False
    if scope is None:
        return True
    # Admins may look at narrower scopes; everyone else only at their own.
    own_scope = scope_for_role(role)
    if own_scope is Scope.GLOBAL:
        return True
    return own_scope is scope


def require_capability(role: Role, operation: Operation, scope: Optional[Scope] = None) -> None:
    if not can_perform(role, operation, scope):
        raise ForbiddenError(f"Role '{role.value}' is not allowed to {operation.value.replace('_', ' ')}")


def require_branch_scope(branch_id: Optional[str], message: str) -> str:
    if not branch_id:
        raise BadRequestError(message, code="UNASSIGNED_SCOPE")
    return branch_id
