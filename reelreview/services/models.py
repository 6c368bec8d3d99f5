"""Shared dataclasses for service layer."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime

# release_year is an Integer column, which is 32-bit on most backends
YEAR_MIN = -(2**31)
YEAR_MAX = 2**31 - 1


def _has_text(value: str | None) -> bool:
    return bool(value and value.strip())


@dataclass(frozen=True, slots=True)
class Principal:
    """The identity a request is authenticated as (the caller's email)."""

    email: str


@dataclass(frozen=True, slots=True)
class MovieSearchCriteria:
    """Independently optional catalog filters.

    Blank strings are normalized to ``None`` so that "empty" and "absent"
    behave the same.
    """

    text: str | None = None
    genre: str | None = None
    year: int | None = None
    actor: str | None = None

    def __post_init__(self) -> None:
        for name in ("text", "genre", "actor"):
            if not _has_text(getattr(self, name)):
                object.__setattr__(self, name, None)

    @property
    def is_empty(self) -> bool:
        return self.text is None and self.genre is None and self.year is None and self.actor is None


@dataclass(slots=True)
class MovieDraft:
    """Every non-identity field of a movie, used for create and full replace."""

    title: str
    genres: list[str] = field(default_factory=list)
    release_year: int | None = None
    actors: list[str] = field(default_factory=list)
    description: str = ""
    poster_url: str | None = None


@dataclass(slots=True)
class ReviewDraft:
    """Review payload as submitted by a caller.

    ``user_id``, ``movie_id`` and ``created_at`` are accepted so that a
    tampered payload can be represented, but they are always overwritten
    server-side.
    """

    rating: int
    comment: str = ""
    user_id: uuid.UUID | None = None
    movie_id: uuid.UUID | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class UserProfile:
    """A user record with the credential scrubbed."""

    id: uuid.UUID
    nickname: str
    email: str
    profile_picture: str | None = None


class ReviewDeletion(enum.Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    NOT_AUTHORIZED = "not_authorized"

    @property
    def performed(self) -> bool:
        return self is ReviewDeletion.DELETED
