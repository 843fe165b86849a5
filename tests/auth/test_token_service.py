from datetime import timedelta

import jwt
import pytest
from sqlalchemy import select

from event_manager.app.common.exceptions import TokenExpired, TokenInvalid, TokenRevoked
from event_manager.app.common.utils.consts import UserRole
from event_manager.app.common.utils.security import create_access_token, create_refresh_token
from event_manager.app.v1.auth.entity.refresh_token import RefreshToken


async def _token_rows(session_factory, user_id: int):
    async with session_factory() as s:
        async with s.begin():
            result = await s.execute(select(RefreshToken).where(RefreshToken.user_id == user_id).order_by(RefreshToken.id))
            return list(result.scalars().all())


async def test_issue_then_verify_returns_same_user(session, token_service, make_user):
    user = await make_user()

    pair = await token_service.issue_token_pair(session, user.id)

    assert token_service.verify_access(pair.access_token) == user.id
    assert pair.refresh_expires_at > pair.access_expires_at


async def test_issue_persists_refresh_token(session, session_factory, token_service, make_user):
    user = await make_user()

    pair = await token_service.issue_token_pair(session, user.id)

    rows = await _token_rows(session_factory, user.id)
    assert [row.token for row in rows] == [pair.refresh_token]
    assert rows[0].revoked_at is None


async def test_refresh_token_is_not_an_access_token(session, token_service, make_user):
    user = await make_user()
    pair = await token_service.issue_token_pair(session, user.id)

    with pytest.raises(TokenInvalid):
        token_service.verify_access(pair.refresh_token)


def test_verify_access_rejects_expired_token(token_service):
    token, _ = create_access_token(7, expires_delta=timedelta(seconds=-5))

    with pytest.raises(TokenExpired):
        token_service.verify_access(token)


def test_verify_access_rejects_bad_signature(token_service):
    token = jwt.encode({"sub": "7", "type": "access", "exp": 9999999999}, "not-the-secret", algorithm="HS256")

    with pytest.raises(TokenInvalid):
        token_service.verify_access(token)


def test_verify_access_rejects_garbage(token_service):
    with pytest.raises(TokenInvalid):
        token_service.verify_access("definitely.not.a-jwt")


async def test_rotate_revokes_old_row_and_creates_one_new(session, session_factory, token_service, make_user):
    user = await make_user()
    first = await token_service.issue_token_pair(session, user.id)

    second = await token_service.rotate_refresh(session, first.refresh_token)

    assert second.refresh_token != first.refresh_token
    rows = {row.token: row for row in await _token_rows(session_factory, user.id)}
    assert len(rows) == 2
    assert rows[first.refresh_token].revoked_at is not None
    assert rows[second.refresh_token].revoked_at is None
    assert token_service.verify_access(second.access_token) == user.id


async def test_rotated_token_works_exactly_once(session, token_service, make_user):
    user = await make_user()
    first = await token_service.issue_token_pair(session, user.id)
    second = await token_service.rotate_refresh(session, first.refresh_token)

    third = await token_service.rotate_refresh(session, second.refresh_token)

    assert third.refresh_token not in (first.refresh_token, second.refresh_token)
    with pytest.raises(TokenRevoked):
        await token_service.rotate_refresh(session, second.refresh_token)


async def test_rotating_same_token_twice_is_revoked(session, token_service, make_user):
    user = await make_user()
    pair = await token_service.issue_token_pair(session, user.id)
    await token_service.rotate_refresh(session, pair.refresh_token)

    with pytest.raises(TokenRevoked):
        await token_service.rotate_refresh(session, pair.refresh_token)


async def test_unknown_refresh_token_is_revoked(session, token_service, make_user):
    user = await make_user()
    # correctly signed but never persisted
    token, _ = create_refresh_token(user.id)

    with pytest.raises(TokenRevoked):
        await token_service.rotate_refresh(session, token)


async def test_expired_refresh_token_never_reaches_database(session, token_service):
    token, _ = create_refresh_token(1, expires_delta=timedelta(seconds=-5))

    with pytest.raises(TokenExpired):
        await token_service.rotate_refresh(session, token)


async def test_access_token_cannot_be_rotated(session, token_service, make_user):
    user = await make_user()
    pair = await token_service.issue_token_pair(session, user.id)

    with pytest.raises(TokenInvalid):
        await token_service.rotate_refresh(session, pair.access_token)


async def test_revoke_all_for_user_is_idempotent(session, session_factory, token_service, make_user):
    user = await make_user()
    other = await make_user(UserRole.ORGANIZER)
    await token_service.issue_token_pair(session, user.id)
    await token_service.issue_token_pair(session, user.id)
    other_pair = await token_service.issue_token_pair(session, other.id)

    assert await token_service.revoke_all_for_user(session, user.id) == 2
    assert await token_service.revoke_all_for_user(session, user.id) == 0

    assert all(row.revoked_at is not None for row in await _token_rows(session_factory, user.id))
    # other users keep their sessions
    await token_service.rotate_refresh(session, other_pair.refresh_token)


async def test_revoke_on_reuse_logs_user_out_everywhere(session, token_service, make_user):
    user = await make_user()
    stolen = await token_service.issue_token_pair(session, user.id)
    current = await token_service.rotate_refresh(session, stolen.refresh_token)
    other_device = await token_service.issue_token_pair(session, user.id)

    assert await token_service.revoke_on_reuse(session, stolen.refresh_token) is True

    for pair in (current, other_device):
        with pytest.raises(TokenRevoked):
            await token_service.rotate_refresh(session, pair.refresh_token)


async def test_revoke_on_reuse_ignores_active_or_unknown_tokens(session, token_service, make_user):
    user = await make_user()
    pair = await token_service.issue_token_pair(session, user.id)
    unknown, _ = create_refresh_token(user.id)

    assert await token_service.revoke_on_reuse(session, pair.refresh_token) is False
    assert await token_service.revoke_on_reuse(session, unknown) is False
    await token_service.rotate_refresh(session, pair.refresh_token)
