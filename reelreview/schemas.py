"""Request and response bodies for the HTTP API."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from reelreview.models import Movie, Review
from reelreview.services.models import YEAR_MAX, YEAR_MIN, MovieDraft, ReviewDraft, UserProfile


class MovieIn(BaseModel):
    title: str = Field(..., min_length=1)
    genres: list[str] = Field(default_factory=list)
    release_year: int | None = Field(default=None, ge=YEAR_MIN, le=YEAR_MAX)
    actors: list[str] = Field(default_factory=list)
    description: str = ""
    poster_url: str | None = None

    def to_draft(self) -> MovieDraft:
        return MovieDraft(
            title=self.title,
            genres=self.genres,
            release_year=self.release_year,
            actors=self.actors,
            description=self.description,
            poster_url=self.poster_url,
        )


class MovieOut(BaseModel):
    id: uuid.UUID
    title: str
    genres: list[str]
    release_year: int | None = None
    actors: list[str]
    description: str
    poster_url: str | None = None

    @classmethod
    def from_movie(cls, movie: Movie) -> "MovieOut":
        return cls(
            id=movie.id,
            title=movie.title,
            genres=list(movie.genres),
            release_year=movie.release_year,
            actors=list(movie.actors),
            description=movie.description or "",
            poster_url=movie.poster_url,
        )


class ReviewIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""
    # accepted but overwritten server-side
    user_id: uuid.UUID | None = None
    movie_id: uuid.UUID | None = None
    created_at: datetime | None = None

    def to_draft(self) -> ReviewDraft:
        return ReviewDraft(
            rating=self.rating,
            comment=self.comment,
            user_id=self.user_id,
            movie_id=self.movie_id,
            created_at=self.created_at,
        )


class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    movie_id: uuid.UUID
    rating: int
    comment: str
    created_at: datetime

    @classmethod
    def from_review(cls, review: Review) -> "ReviewOut":
        return cls.model_validate(review)


class RegisterRequest(BaseModel):
    nickname: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    profile_picture: str | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserProfileOut(BaseModel):
    id: uuid.UUID
    nickname: str
    email: str
    profile_picture: str | None = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserProfileOut":
        return cls(
            id=profile.id,
            nickname=profile.nickname,
            email=profile.email,
            profile_picture=profile.profile_picture,
        )


class ProfileUpdateRequest(BaseModel):
    nickname: str | None = None
    profile_picture: str | None = Field(
        default=None,
        description="Empty string clears the picture; omit to keep it",
    )
