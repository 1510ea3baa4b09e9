"""Domain-level exceptions raised by the movie repository.

Only two store outcomes are translated: a missing row becomes
``RecordNotFoundError`` and a failed version check becomes
``EditConflictError``. Every other database error propagates unchanged.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base class for repository-related errors."""


class RecordNotFoundError(RepositoryError):
    """Raised when the requested movie does not exist."""

    def __init__(self, movie_id: int | None = None):
        self.movie_id = movie_id
        message = "record not found"
        if movie_id is not None:
            message = f"record not found: movie {movie_id}"
        super().__init__(message)


class EditConflictError(RepositoryError):
    """Raised when an update lost the race on the version token."""

    def __init__(self, movie_id: int | None = None, version: int | None = None):
        self.movie_id = movie_id
        self.version = version
        super().__init__(
            f"unable to update movie {movie_id} at version {version} "
            "due to an edit conflict"
        )


__all__ = [
    "RepositoryError",
    "RecordNotFoundError",
    "EditConflictError",
]
