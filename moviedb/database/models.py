"""
SQLAlchemy ORM model for the movies table.

Genres are stored as a PostgreSQL text array; on SQLite the same column
falls back to JSON text so development and test databases keep working.
"""

from datetime import datetime
from typing import List
from sqlalchemy import (
    CheckConstraint, DateTime, Index, Integer, JSON, Text, func,
    literal_column, text
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


GenreList = ARRAY(Text).with_variant(JSON(), "sqlite")


class Movie(Base):
    """
    Movie table storing catalogue entries.

    Attributes:
        id: Primary key, assigned by the database
        created_at: Timestamp when record was created
        title: Movie title (required)
        year: Release year
        runtime: Runtime in minutes
        genres: Genre tags, at most five and without duplicates
        version: Optimistic concurrency token, starts at 1
    """
    __tablename__ = 'movies'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    runtime: Mapped[int] = mapped_column(Integer, nullable=False)
    genres: Mapped[List[str]] = mapped_column(GenreList, nullable=False)
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text("1")
    )

    __table_args__ = (
        CheckConstraint("runtime >= 0", name='movies_runtime_check'),
        CheckConstraint("year >= 1888", name='movies_year_check'),
        CheckConstraint(
            "array_length(genres, 1) BETWEEN 1 AND 5",
            name='genres_length_check'
        ).ddl_if(dialect='postgresql'),
        Index(
            'movies_genres_idx',
            'genres',
            postgresql_using='gin'
        ).ddl_if(dialect='postgresql'),
    )

    def to_dict(self) -> dict:
        """Return the public fields as a plain dictionary."""
        return {
            'id': self.id,
            'created_at': self.created_at,
            'title': self.title,
            'year': self.year,
            'runtime': self.runtime,
            'genres': list(self.genres) if self.genres is not None else None,
            'version': self.version,
        }

    def __repr__(self) -> str:
        return f"<Movie(id={self.id}, title='{self.title}', year={self.year}, version={self.version})>"


# Full-text index backing the title search on PostgreSQL
Index(
    'movies_title_idx',
    func.to_tsvector(literal_column("'simple'"), Movie.title),
    postgresql_using='gin'
).ddl_if(dialect='postgresql')
