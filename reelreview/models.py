"""SQLAlchemy ORM models.

This module defines the catalog (``movies`` plus its ordered genre and actor
rows), the ``users`` table and the ``reviews`` table. Keeping the mapping
isolated here makes future Alembic migrations simpler.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.ext.associationproxy import AssociationProxy, association_proxy
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class MovieGenre(Base):
    __tablename__ = "movie_genres"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    movie_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("movies.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(64))


class MovieActor(Base):
    __tablename__ = "movie_actors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    movie_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("movies.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(255))


class Movie(Base):
    """A catalog entry. Genres and actors keep the order they were given in."""

    __tablename__ = "movies"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    release_year: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    poster_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    genre_entries: Mapped[list[MovieGenre]] = relationship(
        order_by=MovieGenre.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    actor_entries: Mapped[list[MovieActor]] = relationship(
        order_by=MovieActor.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    genres: AssociationProxy[list[str]] = association_proxy(
        "genre_entries", "name", creator=lambda name: MovieGenre(name=name)
    )
    actors: AssociationProxy[list[str]] = association_proxy(
        "actor_entries", "name", creator=lambda name: MovieActor(name=name)
    )

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"Movie(id={self.id}, title={self.title}, release_year={self.release_year})"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    nickname: Mapped[str] = mapped_column(String(64))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    profile_picture: Mapped[str | None] = mapped_column(String(512), nullable=True)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"User(id={self.id}, email={self.email})"


class Review(Base):
    """A rating plus comment left by one user on one movie."""

    __tablename__ = "reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    movie_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("movies.id"), index=True)
    rating: Mapped[int] = mapped_column(Integer)
    comment: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"Review(id={self.id}, user_id={self.user_id}, movie_id={self.movie_id})"
