"""Domain errors raised by the service layer."""

from __future__ import annotations


class ReelReviewError(Exception):
    """Base exception for catalog and review failures."""


class NotFound(ReelReviewError):
    """Raised when a referenced movie, user or review does not exist."""


class NotAuthorized(ReelReviewError):
    """Raised when the caller does not own the resource it tries to mutate."""


class IdentityNotFound(NotAuthorized):
    """Raised when an authenticated principal has no matching user record."""


class AlreadyExists(ReelReviewError):
    """Raised when registering an email that is already taken."""


class StorageFailure(ReelReviewError):
    """Raised when the database is unavailable or fails unexpectedly."""
