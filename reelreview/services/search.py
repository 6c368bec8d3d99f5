"""Catalog search: turn optional filters into one SQL predicate.

``build_movie_filter`` is a pure function from :class:`MovieSearchCriteria`
to a SQLAlchemy boolean expression. Every active filter becomes one term and
the terms are AND-ed together; the free-text filter is itself an OR of a
title test and a description test. With no active filter the function
returns ``None`` and :func:`search_movies` lists the whole catalog.

Substring tests are literal (``%`` and ``_`` in user input are escaped) and
case-insensitive. Genre and actor tests match when any element of the
movie's list contains the value, which the database evaluates as an
``EXISTS`` subquery.
"""

from __future__ import annotations

import logging

from sqlalchemy import ColumnElement, and_, false, or_
from sqlalchemy.orm import Session

from reelreview.db import MovieRepository
from reelreview.models import Movie, MovieActor, MovieGenre
from reelreview.services.models import YEAR_MAX, YEAR_MIN, MovieSearchCriteria

logger = logging.getLogger(__name__)
_repo = MovieRepository()


def build_movie_filter(criteria: MovieSearchCriteria) -> ColumnElement[bool] | None:
    terms: list[ColumnElement[bool]] = []

    if criteria.text is not None:
        terms.append(
            or_(
                Movie.title.icontains(criteria.text, autoescape=True),
                Movie.description.icontains(criteria.text, autoescape=True),
            )
        )
    if criteria.genre is not None:
        terms.append(Movie.genre_entries.any(MovieGenre.name.icontains(criteria.genre, autoescape=True)))
    if criteria.year is not None:
        if YEAR_MIN <= criteria.year <= YEAR_MAX:
            terms.append(Movie.release_year == criteria.year)
        else:
            terms.append(false())
    if criteria.actor is not None:
        terms.append(Movie.actor_entries.any(MovieActor.name.icontains(criteria.actor, autoescape=True)))

    if not terms:
        return None
    return and_(*terms)


def search_movies(
    session: Session,
    text: str | None = None,
    genre: str | None = None,
    year: int | None = None,
    actor: str | None = None,
) -> list[Movie]:
    """Return movies matching every supplied filter, or the whole catalog."""

    criteria = MovieSearchCriteria(text=text, genre=genre, year=year, actor=actor)
    predicate = build_movie_filter(criteria)
    if predicate is None:
        return _repo.list_all(session)
    logger.debug("Searching catalog with %s", criteria)
    return _repo.find(session, predicate)
