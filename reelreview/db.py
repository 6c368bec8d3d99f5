"""Database session management and repositories."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import ColumnElement, Engine, create_engine, event, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from reelreview.core.config import get_settings
from reelreview.models import Base, Movie, Review, User
from reelreview.services.errors import AlreadyExists, StorageFailure

logger = logging.getLogger(__name__)


def _database_url() -> str:
    """Return the SQLAlchemy URL from settings (defaults to local SQLite for dev)."""
    return get_settings().database_url


def install_sqlite_functions(target: Engine) -> None:
    """Replace SQLite's ASCII-only lower() so case-insensitive search folds every letter."""
    if target.dialect.name != "sqlite":
        return

    @event.listens_for(target, "connect")
    def _register_lower(dbapi_connection, _connection_record) -> None:
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


engine = create_engine(_database_url(), future=True)
install_sqlite_functions(engine)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_models() -> None:
    """Create tables if they do not exist (handy for local dev)."""
    Base.metadata.create_all(bind=engine)


def get_session() -> Iterator[Session]:
    """FastAPI-friendly dependency that manages commits/rollbacks."""

    session = SessionLocal()
    try:
        yield session
        with _storage_errors("commit"):
            session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Storage failure while trying to %s: %s", action, exc)
        raise StorageFailure(f"could not {action}") from exc


class MovieRepository:
    """Data access helpers for catalog entries."""

    def get(self, session: Session, movie_id: uuid.UUID) -> Movie | None:
        with _storage_errors("load movie"):
            return session.get(Movie, movie_id)

    def put(self, session: Session, movie: Movie) -> Movie:
        with _storage_errors("save movie"):
            session.add(movie)
            session.flush()  # assign IDs before leaving scope
            session.refresh(movie)
        return movie

    def list_all(self, session: Session) -> list[Movie]:
        with _storage_errors("list movies"):
            return list(session.execute(select(Movie)).scalars())

    def find(self, session: Session, predicate: ColumnElement[bool]) -> list[Movie]:
        """Run ``predicate`` inside the database and return the matching movies."""
        query = select(Movie).where(predicate)
        with _storage_errors("search movies"):
            return list(session.execute(query).scalars())


class UserRepository:
    """Data access helpers for accounts."""

    def get(self, session: Session, user_id: uuid.UUID) -> User | None:
        with _storage_errors("load user"):
            return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        query = select(User).where(User.email == email)
        with _storage_errors("load user by email"):
            return session.execute(query).scalar_one_or_none()

    def create(
        self,
        session: Session,
        *,
        nickname: str,
        email: str,
        password_hash: str,
        profile_picture: str | None = None,
    ) -> User:
        user = User(
            nickname=nickname,
            email=email,
            password_hash=password_hash,
            profile_picture=profile_picture,
        )
        try:
            session.add(user)
            session.flush()
        except IntegrityError as exc:
            # unique index on email caught a concurrent registration
            session.rollback()
            raise AlreadyExists(f"Email already exists: {email}") from exc
        except SQLAlchemyError as exc:
            raise StorageFailure("could not create user") from exc
        return user

    def put(self, session: Session, user: User) -> User:
        with _storage_errors("save user"):
            session.add(user)
            session.flush()
        return user


class ReviewRepository:
    """Data access helpers for reviews."""

    def get(self, session: Session, review_id: uuid.UUID) -> Review | None:
        with _storage_errors("load review"):
            return session.get(Review, review_id)

    def put(self, session: Session, review: Review) -> Review:
        with _storage_errors("save review"):
            session.add(review)
            session.flush()
            session.refresh(review)
        return review

    def delete(self, session: Session, review: Review) -> None:
        with _storage_errors("delete review"):
            session.delete(review)
            session.flush()

    def list_for_movie(self, session: Session, movie_id: uuid.UUID) -> list[Review]:
        query = select(Review).where(Review.movie_id == movie_id).order_by(Review.created_at)
        with _storage_errors("list reviews for movie"):
            return list(session.execute(query).scalars())

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[Review]:
        query = select(Review).where(Review.user_id == user_id).order_by(Review.created_at)
        with _storage_errors("list reviews for user"):
            return list(session.execute(query).scalars())
