import json
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from pizza_service import crud
from pizza_service.core.errors import NotFound, Unauthorized
from pizza_service.core.policy import Role, RoleAssignment
from pizza_service.core.security import create_access_token, decode_token
from pizza_service.core.sessions import SessionStore
from pizza_service.models import Franchise, Session


@pytest.fixture
async def user(db, name):
    return await crud.create_user(
        db, name, f"{name}@jwt.com", "secret", [RoleAssignment.diner(), RoleAssignment.admin()]
    )


async def test_issue_then_resolve(db, user):
    store = SessionStore(db)
    token = await store.issue(user)

    actor = await store.resolve(token)

    assert actor.id == user.id
    assert actor.is_admin
    assert {assignment.role for assignment in actor.roles} == {Role.DINER, Role.ADMIN}


async def test_token_carries_role_snapshot(db, user):
    token = await SessionStore(db).issue(user)
    payload = decode_token(token)
    assert payload["sub"] == str(user.id)
    assert payload["roles"] == [{"role": "diner"}, {"role": "admin"}]


async def test_revoked_token_is_rejected(db, user):
    store = SessionStore(db)
    token = await store.issue(user)
    actor = await store.resolve(token)

    await store.revoke(actor.session_id)

    with pytest.raises(Unauthorized):
        await store.resolve(token)


async def test_new_token_invalidates_previous(db, user):
    store = SessionStore(db)
    old = await store.issue(user)
    new = await store.issue(user)

    assert (await store.resolve(new)).id == user.id
    with pytest.raises(Unauthorized):
        await store.resolve(old)


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
async def test_malformed_tokens_are_rejected(db, token):
    with pytest.raises(Unauthorized):
        await SessionStore(db).resolve(token)


async def test_token_signed_with_another_key_is_rejected(db, user):
    token = await SessionStore(db).issue(user)
    claims = decode_token(token)
    forged = jwt.encode(claims, "not-the-secret", algorithm="HS256")

    with pytest.raises(Unauthorized):
        await SessionStore(db).resolve(forged)


async def test_well_signed_token_without_session_row_is_rejected(db, user):
    token, _, _ = create_access_token(user.id, uuid.uuid4().hex, [])
    with pytest.raises(Unauthorized):
        await SessionStore(db).resolve(token)


async def test_expired_session_row_is_rejected_and_purged(db, user):
    session_id = uuid.uuid4().hex
    token, issued_at, _ = create_access_token(user.id, session_id, [])
    db.add(Session(
        token_id=session_id,
        user_id=user.id,
        roles=json.dumps([]),
        issued_at=issued_at,
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
    ))
    await db.commit()

    store = SessionStore(db)
    with pytest.raises(Unauthorized):
        await store.resolve(token)
    assert await store.purge_expired() == 1


async def test_expired_token_is_rejected(db, user):
    token, _, _ = create_access_token(
        user.id, uuid.uuid4().hex, [], expires_delta=timedelta(seconds=-5)
    )
    assert decode_token(token) is None
    with pytest.raises(Unauthorized):
        await SessionStore(db).resolve(token)


async def test_revoke_role_only_drops_sessions_holding_it(db, name):
    franchise = Franchise(name=name)
    db.add(franchise)
    await db.commit()

    holder = await crud.create_user(
        db, f"{name}a", f"{name}a@jwt.com", "secret", [RoleAssignment.franchisee(franchise.id)]
    )
    bystander = await crud.create_user(db, f"{name}b", f"{name}b@jwt.com", "secret", [RoleAssignment.diner()])
    store = SessionStore(db)
    holder_token = await store.issue(holder)
    bystander_token = await store.issue(bystander)

    revoked = await store.revoke_role(
        RoleAssignment.franchisee(franchise.id), [holder.id, bystander.id]
    )
    await db.commit()

    assert revoked == 1
    with pytest.raises(Unauthorized):
        await store.resolve(holder_token)
    assert (await store.resolve(bystander_token)).id == bystander.id


async def test_user_cannot_be_scoped_to_missing_franchise(db, name):
    with pytest.raises(NotFound):
        await crud.create_user(
            db, name, f"{name}@jwt.com", "secret", [RoleAssignment.franchisee(424242)]
        )
