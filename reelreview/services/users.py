"""Account registration, credential checks and profile updates."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.orm import Session

from reelreview.core.auth import hash_password, verify_password
from reelreview.db import UserRepository
from reelreview.models import User
from reelreview.services import identity
from reelreview.services.errors import AlreadyExists, NotAuthorized, NotFound
from reelreview.services.models import Principal, UserProfile

logger = logging.getLogger(__name__)
_repo = UserRepository()


def register_user(
    session: Session,
    *,
    nickname: str,
    email: str,
    password: str,
    profile_picture: str | None = None,
) -> UserProfile:
    """Create an account. The pre-check gives a clean error; the unique index closes the race."""

    if _repo.get_by_email(session, email) is not None:
        raise AlreadyExists(f"Email already exists: {email}")

    user = _repo.create(
        session,
        nickname=nickname,
        email=email,
        password_hash=hash_password(password),
        profile_picture=profile_picture,
    )
    logger.info("Registered user %s", user.id)
    return identity.to_profile(user)


def authenticate(session: Session, email: str, password: str) -> UserProfile | None:
    user = _repo.get_by_email(session, email)
    if user is None or not verify_password(user.password_hash, password):
        return None
    return identity.to_profile(user)


def update_profile(
    session: Session,
    principal: Principal,
    target_user_id: uuid.UUID,
    new_nickname: str | None = None,
    new_profile_picture: str | None = None,
) -> UserProfile:
    """Apply a partial profile update on the caller's own account.

    An empty ``new_nickname`` leaves the nickname alone, while an empty
    ``new_profile_picture`` clears the picture. ``None`` means "omitted" for
    both.
    """

    caller = identity.resolve(session, principal)
    if caller.id != target_user_id:
        logger.warning("User %s tried to update profile %s", caller.id, target_user_id)
        raise NotAuthorized("User not authorized to update this profile.")

    user = _repo.get(session, target_user_id)
    if user is None:
        raise NotFound(f"User not found with id: {target_user_id}")
    return _apply_profile_update(session, user, new_nickname, new_profile_picture)


def update_own_profile(
    session: Session,
    principal: Principal,
    new_nickname: str | None = None,
    new_profile_picture: str | None = None,
) -> UserProfile:
    """Same partial update as :func:`update_profile`, targeting the caller's account."""

    caller = identity.resolve(session, principal)
    return _apply_profile_update(session, caller, new_nickname, new_profile_picture)


def _apply_profile_update(
    session: Session,
    user: User,
    new_nickname: str | None,
    new_profile_picture: str | None,
) -> UserProfile:
    if new_nickname:
        user.nickname = new_nickname
    if new_profile_picture is not None:
        user.profile_picture = new_profile_picture

    _repo.put(session, user)
    return identity.to_profile(user)
