"""Role and ownership rules for every protected action.

Each action maps to the roles allowed to perform it. Roles listed in
``owner_scoped`` may only act on resources they created.
"""
from dataclasses import dataclass
from enum import Enum

from .entities import Identity, Role
from .errors import Forbidden

ACCESS_DENIED = "Access denied"


class Action(str, Enum):
    CREATE_ASSIGNMENT = "assignment:create"
    LIST_ASSIGNMENTS = "assignment:list"
    READ_ASSIGNMENT = "assignment:read"
    UPDATE_ASSIGNMENT = "assignment:update"
    DELETE_ASSIGNMENT = "assignment:delete"
    SUBMIT_ASSIGNMENT = "assignment:submit"
    VIEW_ASSIGNMENT_STATS = "assignment:stats"
    MANAGE_USERS = "user:manage"
    UPLOAD_ASSIGNMENT_FILE = "upload:assignment"
    UPLOAD_POST_IMAGE = "upload:post-image"
    VIEW_UPLOAD_STATUS = "upload:status"


@dataclass(frozen=True)
class Rule:
    roles: frozenset
    denied: str
    owner_scoped: frozenset = frozenset()


_ALL = frozenset(Role)
_STAFF = frozenset({Role.PROFESSOR, Role.ADMIN})
_PROFESSOR = frozenset({Role.PROFESSOR})

RULES: dict[Action, Rule] = {
    Action.CREATE_ASSIGNMENT: Rule(_STAFF, "Only professors and admins can create assignments"),
    Action.LIST_ASSIGNMENTS: Rule(_ALL, ACCESS_DENIED, owner_scoped=_PROFESSOR),
    Action.READ_ASSIGNMENT: Rule(_ALL, ACCESS_DENIED, owner_scoped=_PROFESSOR),
    Action.UPDATE_ASSIGNMENT: Rule(
        _STAFF, "Only professors and admins can update assignments", owner_scoped=_PROFESSOR
    ),
    Action.DELETE_ASSIGNMENT: Rule(
        _STAFF, "Only professors and admins can delete assignments", owner_scoped=_PROFESSOR
    ),
    Action.SUBMIT_ASSIGNMENT: Rule(frozenset({Role.STUDENT}), "Only students can submit assignments"),
    Action.VIEW_ASSIGNMENT_STATS: Rule(
        _STAFF, "Only professors and admins can view assignment statistics", owner_scoped=_PROFESSOR
    ),
    Action.MANAGE_USERS: Rule(frozenset({Role.ADMIN}), "Admin access required"),
    Action.UPLOAD_ASSIGNMENT_FILE: Rule(frozenset({Role.STUDENT}), "Only students can upload assignment files"),
    Action.UPLOAD_POST_IMAGE: Rule(_ALL, ACCESS_DENIED),
    Action.VIEW_UPLOAD_STATUS: Rule(_STAFF, "Only admins and professors can check service status"),
}


def authorize(actor: Identity, action: Action, owner_id: int | None = None) -> None:
    """Raise Forbidden unless ``actor`` may perform ``action``.

    ``owner_id`` is the creator of the target resource, when there is one.
    """
    rule = RULES[action]
    if actor.role not in rule.roles:
        raise Forbidden(rule.denied)
    if owner_id is not None and actor.role in rule.owner_scoped and owner_id != actor.id:
        raise Forbidden(ACCESS_DENIED)


def owner_scope(actor: Identity, action: Action) -> int | None:
    """Creator id a collection query must be restricted to, or None for all."""
    authorize(actor, action)
    if actor.role in RULES[action].owner_scoped:
        return actor.id
    return None


def ensure_role(actor: Identity, allowed: frozenset | set | tuple) -> None:
    if actor.role not in allowed:
        raise Forbidden("Insufficient permissions")
