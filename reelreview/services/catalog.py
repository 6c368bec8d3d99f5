"""Service helpers for catalog writes and lookups."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.orm import Session

from reelreview.db import MovieRepository
from reelreview.models import Movie
from reelreview.services.errors import NotFound
from reelreview.services.models import MovieDraft

logger = logging.getLogger(__name__)
_repo = MovieRepository()


def add_movie(session: Session, draft: MovieDraft) -> Movie:
    movie = Movie()
    _apply_draft(movie, draft)
    stored = _repo.put(session, movie)
    logger.info("Added movie %s (%s)", stored.id, stored.title)
    return stored


def get_movie(session: Session, movie_id: uuid.UUID) -> Movie:
    movie = _repo.get(session, movie_id)
    if movie is None:
        raise NotFound(f"Movie not found with id: {movie_id}")
    return movie


def replace_movie(session: Session, movie_id: uuid.UUID, draft: MovieDraft) -> Movie:
    """Overwrite every field except the identifier."""

    movie = get_movie(session, movie_id)
    _apply_draft(movie, draft)
    return _repo.put(session, movie)


def _apply_draft(movie: Movie, draft: MovieDraft) -> None:
    movie.title = draft.title
    movie.genres = list(draft.genres)
    movie.release_year = draft.release_year
    movie.actors = list(draft.actors)
    movie.description = draft.description
    movie.poster_url = draft.poster_url
