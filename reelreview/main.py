"""FastAPI entrypoint wiring the catalog, review and account services."""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from reelreview.core.auth import create_access_token, get_current_principal
from reelreview.core.config import DEFAULT_JWT_SECRET, get_settings
from reelreview.db import get_session, init_models
from reelreview.schemas import (
    LoginRequest,
    MovieIn,
    MovieOut,
    ProfileUpdateRequest,
    RegisterRequest,
    ReviewIn,
    ReviewOut,
    TokenResponse,
    UserProfileOut,
)
from reelreview.services import catalog, identity, reviews, users
from reelreview.services.errors import (
    AlreadyExists,
    IdentityNotFound,
    NotAuthorized,
    NotFound,
    StorageFailure,
)
from reelreview.services.models import Principal, ReviewDeletion
from reelreview.services.search import search_movies

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Ensure database tables before serving."""

    if get_settings().jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET not configured. Using the insecure development secret.")
    init_models()
    yield


app = FastAPI(title="ReelReview Service", lifespan=lifespan)


@app.exception_handler(StorageFailure)
async def _storage_failure_handler(_: Request, exc: StorageFailure) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage is unavailable"},
    )


# ---------------- MOVIES ----------------


@app.get("/api/movies", response_model=list[MovieOut])
def list_movies(
    query: str | None = None,
    genre: str | None = None,
    year: str | None = Query(default=None, description="Exact release year"),
    actor: str | None = None,
    session: Session = Depends(get_session),
) -> list[MovieOut]:
    movies = search_movies(
        session,
        text=query,
        genre=genre,
        year=_parse_year(year),
        actor=actor,
    )
    return [MovieOut.from_movie(movie) for movie in movies]


@app.get("/api/movies/{movie_id}", response_model=MovieOut)
def get_movie(movie_id: uuid.UUID, session: Session = Depends(get_session)) -> MovieOut:
    try:
        movie = catalog.get_movie(session, movie_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return MovieOut.from_movie(movie)


@app.post("/api/movies", response_model=MovieOut, status_code=status.HTTP_201_CREATED)
def add_movie(
    payload: MovieIn,
    session: Session = Depends(get_session),
    _: Principal = Depends(get_current_principal),
) -> MovieOut:
    movie = catalog.add_movie(session, payload.to_draft())
    return MovieOut.from_movie(movie)


@app.put("/api/movies/{movie_id}", response_model=MovieOut)
def replace_movie(
    movie_id: uuid.UUID,
    payload: MovieIn,
    session: Session = Depends(get_session),
    _: Principal = Depends(get_current_principal),
) -> MovieOut:
    try:
        movie = catalog.replace_movie(session, movie_id, payload.to_draft())
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return MovieOut.from_movie(movie)


# ---------------- REVIEWS ----------------


@app.get("/api/movies/{movie_id}/reviews", response_model=list[ReviewOut])
def list_movie_reviews(movie_id: uuid.UUID, session: Session = Depends(get_session)) -> list[ReviewOut]:
    return [ReviewOut.from_review(r) for r in reviews.list_reviews_for_movie(session, movie_id)]


@app.post(
    "/api/movies/{movie_id}/reviews",
    response_model=ReviewOut,
    status_code=status.HTTP_201_CREATED,
)
def add_review(
    movie_id: uuid.UUID,
    payload: ReviewIn,
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
) -> ReviewOut:
    try:
        review = reviews.create_review(session, principal, movie_id, payload.to_draft())
    except IdentityNotFound as exc:
        raise _unauthorized(exc) from exc
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ReviewOut.from_review(review)


@app.delete("/api/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
) -> Response:
    try:
        outcome = reviews.delete_review(session, principal, review_id)
    except IdentityNotFound as exc:
        raise _unauthorized(exc) from exc

    if outcome is ReviewDeletion.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    if outcome is ReviewDeletion.NOT_AUTHORIZED:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User not authorized to delete this review.",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/api/users/{user_id}/reviews", response_model=list[ReviewOut])
def list_user_reviews(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
    _: Principal = Depends(get_current_principal),
) -> list[ReviewOut]:
    return [ReviewOut.from_review(r) for r in reviews.list_reviews_by_user(session, user_id)]


# ---------------- ACCOUNTS ----------------


@app.post("/api/users/register", response_model=UserProfileOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, session: Session = Depends(get_session)) -> UserProfileOut:
    try:
        profile = users.register_user(
            session,
            nickname=payload.nickname,
            email=payload.email,
            password=payload.password,
            profile_picture=payload.profile_picture,
        )
    except AlreadyExists as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists") from exc
    return UserProfileOut.from_profile(profile)


@app.post("/api/auth/login", response_model=TokenResponse)
def login(payload: LoginRequest, session: Session = Depends(get_session)) -> TokenResponse:
    profile = users.authenticate(session, payload.email, payload.password)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(access_token=create_access_token(profile.email))


@app.get("/api/users/me", response_model=UserProfileOut)
def get_my_profile(
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
) -> UserProfileOut:
    try:
        profile = identity.fetch_my_profile(session, principal)
    except IdentityNotFound as exc:
        raise _unauthorized(exc) from exc
    return UserProfileOut.from_profile(profile)


@app.put("/api/users/me", response_model=UserProfileOut)
def update_my_profile(
    payload: ProfileUpdateRequest,
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
) -> UserProfileOut:
    try:
        profile = users.update_own_profile(
            session,
            principal,
            new_nickname=payload.nickname,
            new_profile_picture=payload.profile_picture,
        )
    except IdentityNotFound as exc:
        raise _unauthorized(exc) from exc
    return UserProfileOut.from_profile(profile)


@app.put("/api/users/{user_id}", response_model=UserProfileOut)
def update_profile(
    user_id: uuid.UUID,
    payload: ProfileUpdateRequest,
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
) -> UserProfileOut:
    return _update_profile(session, principal, user_id, payload)


def _update_profile(
    session: Session,
    principal: Principal,
    user_id: uuid.UUID,
    payload: ProfileUpdateRequest,
) -> UserProfileOut:
    try:
        profile = users.update_profile(
            session,
            principal,
            user_id,
            new_nickname=payload.nickname,
            new_profile_picture=payload.profile_picture,
        )
    except IdentityNotFound as exc:
        raise _unauthorized(exc) from exc
    except NotAuthorized as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return UserProfileOut.from_profile(profile)


def _unauthorized(exc: IdentityNotFound) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=str(exc),
        headers={"WWW-Authenticate": "Bearer"},
    )


def _parse_year(raw: str | None) -> int | None:
    """Blank means "no year filter"; anything else must be an integer."""
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="year must be an integer",
        ) from exc
