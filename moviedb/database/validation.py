"""
Validation rules for movie data.

``MovieInput`` describes a new movie, ``MovieUpdate`` a partial change to an
existing one. Both raise ``pydantic.ValidationError`` on bad input.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from moviedb.database.models import Movie


MIN_YEAR = 1888
MAX_TITLE_BYTES = 500
MAX_GENRES = 5


def _check_title(value: str) -> str:
    if not value.strip():
        raise ValueError("must be provided")
    if len(value.encode("utf-8")) > MAX_TITLE_BYTES:
        raise ValueError(f"must not be more than {MAX_TITLE_BYTES} bytes long")
    return value


def _check_year(value: int) -> int:
    if value > date.today().year:
        raise ValueError("must not be in the future")
    return value


def _check_genres(value: List[str]) -> List[str]:
    if len(set(value)) != len(value):
        raise ValueError("must not contain duplicate values")
    return value


class MovieInput(BaseModel):
    """Fields a client supplies when creating a movie."""

    title: str = Field(..., min_length=1)
    year: int = Field(..., ge=MIN_YEAR)
    runtime: int = Field(..., gt=0)
    genres: List[str] = Field(..., min_length=1, max_length=MAX_GENRES)

    @field_validator("title")
    @classmethod
    def title_valid(cls, value: str) -> str:
        return _check_title(value)

    @field_validator("year")
    @classmethod
    def year_valid(cls, value: int) -> int:
        return _check_year(value)

    @field_validator("genres")
    @classmethod
    def genres_valid(cls, value: List[str]) -> List[str]:
        return _check_genres(value)

    def to_movie(self) -> Movie:
        """Build a transient Movie ready for MovieRepository.insert()."""
        return Movie(
            title=self.title,
            year=self.year,
            runtime=self.runtime,
            genres=list(self.genres),
        )


class MovieUpdate(BaseModel):
    """Partial update; fields left as None keep their current value."""

    title: Optional[str] = Field(None, min_length=1)
    year: Optional[int] = Field(None, ge=MIN_YEAR)
    runtime: Optional[int] = Field(None, gt=0)
    genres: Optional[List[str]] = Field(None, min_length=1, max_length=MAX_GENRES)

    @field_validator("title")
    @classmethod
    def title_valid(cls, value):
        return value if value is None else _check_title(value)

    @field_validator("year")
    @classmethod
    def year_valid(cls, value):
        return value if value is None else _check_year(value)

    @field_validator("genres")
    @classmethod
    def genres_valid(cls, value):
        return value if value is None else _check_genres(value)

    def apply_to(self, movie: Movie) -> Movie:
        """
        Copy the provided fields onto a fetched movie.

        The id and version are left alone so the repository's update still
        checks against the version the movie was loaded with.

        Args:
            movie: Movie previously returned by MovieRepository.get()

        Returns:
            The same movie, modified in place

        Raises:
            pydantic.ValidationError: If the merged movie is invalid
        """
        for field, value in self.model_dump(exclude_none=True).items():
            setattr(movie, field, value)
        validate_movie(movie)
        return movie


def validate_movie(movie: Movie) -> MovieInput:
    """
    Check a Movie entity against the same rules as new input.

    Raises:
        pydantic.ValidationError: If any field is invalid
    """
    return MovieInput(
        title=movie.title,
        year=movie.year,
        runtime=movie.runtime,
        genres=list(movie.genres or []),
    )
