"""Review creation, deletion and listings.

Both mutating operations resolve the caller first and never trust ownership
fields from the payload. Deletion reports its outcome as a
:class:`ReviewDeletion` value: "not found" and "not the author" are
expected branches for the caller, not exceptions.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from reelreview.db import MovieRepository, ReviewRepository
from reelreview.models import Review
from reelreview.services import identity
from reelreview.services.errors import NotFound
from reelreview.services.models import Principal, ReviewDeletion, ReviewDraft

logger = logging.getLogger(__name__)
_reviews = ReviewRepository()
_movies = MovieRepository()


def create_review(
    session: Session,
    principal: Principal,
    movie_id: uuid.UUID,
    draft: ReviewDraft,
) -> Review:
    """Store a review owned by the caller, ignoring any owner/movie/date in ``draft``."""

    caller = identity.resolve(session, principal)
    if _movies.get(session, movie_id) is None:
        raise NotFound(f"Movie not found with id: {movie_id}")

    if draft.user_id is not None and draft.user_id != caller.id:
        logger.warning(
            "Discarding payload owner %s for review by %s", draft.user_id, caller.id
        )
    review = Review(
        user_id=caller.id,
        movie_id=movie_id,
        rating=draft.rating,
        comment=draft.comment,
        created_at=datetime.now(timezone.utc),
    )
    stored = _reviews.put(session, review)
    logger.info("User %s reviewed movie %s", caller.id, movie_id)
    return stored


def delete_review(session: Session, principal: Principal, review_id: uuid.UUID) -> ReviewDeletion:
    caller = identity.resolve(session, principal)
    review = _reviews.get(session, review_id)
    if review is None:
        return ReviewDeletion.NOT_FOUND
    if review.user_id != caller.id:
        logger.warning("User %s tried to delete review %s owned by %s", caller.id, review_id, review.user_id)
        return ReviewDeletion.NOT_AUTHORIZED

    _reviews.delete(session, review)
    logger.info("User %s deleted review %s", caller.id, review_id)
    return ReviewDeletion.DELETED


def list_reviews_for_movie(session: Session, movie_id: uuid.UUID) -> list[Review]:
    return _reviews.list_for_movie(session, movie_id)


def list_reviews_by_user(session: Session, user_id: uuid.UUID) -> list[Review]:
    return _reviews.list_for_user(session, user_id)
