import pytest

from pizza_service.core.errors import Forbidden
from pizza_service.core.policy import (
    Action,
    Actor,
    Decision,
    Role,
    RoleAssignment,
    Target,
    authorize,
    decide,
)

ADMIN = Actor(id=1, roles=(RoleAssignment.admin(),))
DINER = Actor(id=2, roles=(RoleAssignment.diner(),))
FRANCHISEE = Actor(id=3, roles=(RoleAssignment.diner(), RoleAssignment.franchisee(10)))


@pytest.mark.parametrize("action", list(Action))
def test_admin_may_do_anything(action):
    verdict = decide(ADMIN, action, Target(user_id=99, franchise_id=99))
    assert verdict.allowed
    assert verdict.rule == "admin"


@pytest.mark.parametrize("action", [Action.READ_USER, Action.UPDATE_USER, Action.LIST_USER_FRANCHISES])
def test_self_service_on_own_profile(action):
    assert decide(DINER, action, Target(user_id=DINER.id)).allowed


@pytest.mark.parametrize("action", [Action.READ_USER, Action.UPDATE_USER, Action.LIST_USER_FRANCHISES])
def test_user_resource_of_someone_else_is_denied(action):
    verdict = decide(DINER, action, Target(user_id=ADMIN.id))
    assert verdict.decision == Decision.DENY
    assert verdict.rule == "other user"


def test_assigning_roles_requires_admin_even_on_self():
    assert not decide(DINER, Action.ASSIGN_ROLES, Target(user_id=DINER.id)).allowed


@pytest.mark.parametrize("action", [Action.CREATE_STORE, Action.DELETE_STORE])
def test_franchisee_manages_own_franchise(action):
    assert decide(FRANCHISEE, action, Target(franchise_id=10)).allowed


@pytest.mark.parametrize("action", [Action.CREATE_STORE, Action.DELETE_STORE])
def test_franchisee_scope_does_not_extend_to_other_franchises(action):
    assert not decide(FRANCHISEE, action, Target(franchise_id=11)).allowed
    assert not decide(FRANCHISEE, action, Target()).allowed


def test_diner_cannot_manage_stores():
    assert not decide(DINER, Action.CREATE_STORE, Target(franchise_id=10)).allowed


@pytest.mark.parametrize("actor", [DINER, FRANCHISEE])
def test_franchise_lifecycle_is_admin_only(actor):
    assert not decide(actor, Action.CREATE_FRANCHISE).allowed
    assert not decide(actor, Action.DELETE_FRANCHISE, Target(franchise_id=10)).allowed


def test_menu_is_admin_only():
    verdict = decide(FRANCHISEE, Action.UPDATE_MENU)
    assert not verdict.allowed
    assert verdict.rule == "menu is admin only"


@pytest.mark.parametrize("action", [Action.CREATE_ORDER, Action.READ_ORDERS])
def test_orders_are_scoped_to_their_owner(action):
    assert decide(DINER, action, Target(user_id=DINER.id)).allowed
    assert not decide(DINER, action, Target(user_id=FRANCHISEE.id)).allowed


def test_actor_without_roles_can_still_order_and_list_users():
    nobody = Actor(id=7)
    assert decide(nobody, Action.CREATE_ORDER, Target(user_id=7)).allowed
    assert decide(nobody, Action.LIST_USERS).allowed
    assert not decide(nobody, Action.CREATE_FRANCHISE).allowed


def test_decide_is_deterministic():
    first = decide(FRANCHISEE, Action.DELETE_STORE, Target(franchise_id=10))
    second = decide(FRANCHISEE, Action.DELETE_STORE, Target(franchise_id=10))
    assert first == second


def test_authorize_raises_forbidden_on_deny():
    with pytest.raises(Forbidden) as exc_info:
        authorize(DINER, Action.UPDATE_USER, Target(user_id=ADMIN.id))
    assert exc_info.value.status_code == 403
    assert exc_info.value.to_dict() == {"message": "unauthorized"}


def test_authorize_passes_on_allow():
    authorize(FRANCHISEE, Action.CREATE_STORE, Target(franchise_id=10))


class TestRoleAssignment:
    def test_franchisee_requires_scope(self):
        with pytest.raises(ValueError):
            RoleAssignment(Role.FRANCHISEE)

    def test_global_roles_reject_scope(self):
        with pytest.raises(ValueError):
            RoleAssignment(Role.ADMIN, 3)

    def test_dict_shape(self):
        assert RoleAssignment.diner().to_dict() == {"role": "diner"}
        assert RoleAssignment.franchisee(4).to_dict() == {"role": "franchisee", "franchiseId": 4}
        assert RoleAssignment.from_dict({"role": "franchisee", "franchiseId": 4}) == RoleAssignment.franchisee(4)

    def test_actor_franchise_ids(self):
        actor = Actor(id=1, roles=(RoleAssignment.franchisee(1), RoleAssignment.franchisee(2)))
        assert actor.franchise_ids() == {1, 2}
        assert not actor.is_admin
