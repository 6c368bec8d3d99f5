"""Resolve an authenticated principal to its user record."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from reelreview.db import UserRepository
from reelreview.models import User
from reelreview.services.errors import IdentityNotFound
from reelreview.services.models import Principal, UserProfile

logger = logging.getLogger(__name__)
_repo = UserRepository()


def resolve(session: Session, principal: Principal) -> User:
    """Look up the caller by email; a miss means the session and store disagree."""

    user = _repo.get_by_email(session, principal.email)
    if user is None:
        logger.warning("Authenticated principal %s has no user record", principal.email)
        raise IdentityNotFound(f"User not found with email: {principal.email}")
    return user


def to_profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        nickname=user.nickname,
        email=user.email,
        profile_picture=user.profile_picture,
    )


def fetch_my_profile(session: Session, principal: Principal) -> UserProfile:
    return to_profile(resolve(session, principal))
