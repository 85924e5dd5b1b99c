"""
Authorization Policy

Decides whether an authenticated actor may perform an action on a target.
``decide`` is a pure function of (actor, action, target): it touches no
database and has no side effects, so every rule can be unit tested on its
own. ``authorize`` is the raising form used by request handlers.

Rules, first match wins:
    1. Admin may do anything.
    2. A user may read and update their own profile.
    3. Nobody else may touch a user resource.
    4. A franchisee manages the stores of their franchise.
    5. Only admins change the menu.
    6. Anyone authenticated may place and read their own orders.
    7. Everything else is denied.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from pizza_service.core.errors import Forbidden

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    """Kind tag of a role assignment."""
    DINER = "diner"
    ADMIN = "admin"
    FRANCHISEE = "franchisee"


@dataclass(frozen=True)
class RoleAssignment:
    """
    One role held by a user.

    ``franchise_id`` carries the scope of a franchisee assignment and is
    None for the global kinds.
    """
    role: Role
    franchise_id: Optional[int] = None

    def __post_init__(self):
        if self.role == Role.FRANCHISEE and self.franchise_id is None:
            raise ValueError("franchisee role requires a franchise id")
        if self.role != Role.FRANCHISEE and self.franchise_id is not None:
            raise ValueError(f"{self.role.value} role cannot be scoped to a franchise")

    @classmethod
    def diner(cls) -> "RoleAssignment":
        return cls(Role.DINER)

    @classmethod
    def admin(cls) -> "RoleAssignment":
        return cls(Role.ADMIN)

    @classmethod
    def franchisee(cls, franchise_id: int) -> "RoleAssignment":
        return cls(Role.FRANCHISEE, franchise_id)

    def to_dict(self) -> dict[str, Any]:
        """JSON shape used in responses and token claims."""
        data: dict[str, Any] = {"role": self.role.value}
        if self.franchise_id is not None:
            data["franchiseId"] = self.franchise_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoleAssignment":
        return cls(Role(data["role"]), data.get("franchiseId"))


@dataclass(frozen=True)
class Actor:
    """The authenticated caller: user id plus the role snapshot of the token."""
    id: int
    roles: tuple[RoleAssignment, ...] = ()
    session_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return any(assignment.role == Role.ADMIN for assignment in self.roles)

    def franchise_ids(self) -> set[int]:
        """Franchises this actor administers as a franchisee."""
        return {
            assignment.franchise_id
            for assignment in self.roles
            if assignment.role == Role.FRANCHISEE
        }


class Action(str, enum.Enum):
    READ_USER = "read_user"
    UPDATE_USER = "update_user"
    ASSIGN_ROLES = "assign_roles"
    LIST_USERS = "list_users"
    LIST_USER_FRANCHISES = "list_user_franchises"
    CREATE_FRANCHISE = "create_franchise"
    DELETE_FRANCHISE = "delete_franchise"
    CREATE_STORE = "create_store"
    DELETE_STORE = "delete_store"
    UPDATE_MENU = "update_menu"
    CREATE_ORDER = "create_order"
    READ_ORDERS = "read_orders"


# Actions whose target is a user profile and which the owner may perform
SELF_SERVICE_ACTIONS = frozenset({
    Action.READ_USER,
    Action.UPDATE_USER,
    Action.LIST_USER_FRANCHISES,
})

USER_RESOURCE_ACTIONS = SELF_SERVICE_ACTIONS | {Action.ASSIGN_ROLES}

FRANCHISEE_ACTIONS = frozenset({
    Action.CREATE_STORE,
    Action.DELETE_STORE,
})

OWN_ORDER_ACTIONS = frozenset({Action.CREATE_ORDER, Action.READ_ORDERS})


@dataclass(frozen=True)
class Target:
    """
    What an action is aimed at.

    ``user_id`` identifies a user profile or the owner of an order history,
    ``franchise_id`` the franchise whose stores are managed.
    """
    user_id: Optional[int] = None
    franchise_id: Optional[int] = None


class Decision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class Verdict:
    decision: Decision
    rule: str = field(compare=False)

    @property
    def allowed(self) -> bool:
        return self.decision == Decision.ALLOW


def _allow(rule: str) -> Verdict:
    return Verdict(Decision.ALLOW, rule)


def _deny(rule: str) -> Verdict:
    return Verdict(Decision.DENY, rule)


def decide(actor: Actor, action: Action, target: Target = Target()) -> Verdict:
    """Apply the role rules in precedence order and return the first match."""
    if actor.is_admin:
        return _allow("admin")

    if action in USER_RESOURCE_ACTIONS:
        if action in SELF_SERVICE_ACTIONS and target.user_id == actor.id:
            return _allow("self")
        return _deny("other user")

    if action in FRANCHISEE_ACTIONS:
        if target.franchise_id is not None and target.franchise_id in actor.franchise_ids():
            return _allow("franchisee")
        return _deny("not a franchisee of this franchise")

    if action == Action.UPDATE_MENU:
        return _deny("menu is admin only")

    if action in OWN_ORDER_ACTIONS:
        if target.user_id == actor.id:
            return _allow("own orders")
        return _deny("orders of another user")

    if action == Action.LIST_USERS:
        return _allow("authenticated")

    return _deny("default")


def authorize(actor: Actor, action: Action, target: Target = Target()) -> None:
    """
    Raise Forbidden unless the policy allows the action.

    Raises:
        Forbidden: the policy denied the action
    """
    verdict = decide(actor, action, target)
    if not verdict.allowed:
        logger.info(
            f"Denied {action.value} for user {actor.id} on {target} ({verdict.rule})"
        )
        raise Forbidden()
