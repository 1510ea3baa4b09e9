"""
Movie repository: create, read, update, delete and search.

Every operation runs a single statement in its own session under a query
deadline. Store errors propagate unchanged except for the two cases that
map to domain errors: a missing row (``RecordNotFoundError``) and a failed
version check on update (``EditConflictError``).
"""

from typing import List, Optional, Sequence

from sqlalchemy import Select, delete, insert, select, update
from sqlalchemy.exc import NoResultFound

from moviedb.database.connection import DatabaseManager, get_db_manager
from moviedb.database.errors import EditConflictError, RecordNotFoundError
from moviedb.database.filters import Filters
from moviedb.database.models import Movie
from moviedb.database.predicates import genres_contain, title_matches
from moviedb.database.timeouts import query_deadline
from moviedb.utils.logging_config import get_logger

logger = get_logger(__name__)


def search_statement(title: str, genres: Sequence[str], filters: Filters) -> Select:
    """Build the SELECT for one page of a title/genre search."""
    stmt = select(Movie)
    if title:
        stmt = stmt.where(title_matches(Movie.title, title))
    if genres:
        stmt = stmt.where(genres_contain(Movie.genres, genres))
    return (
        stmt.order_by(*filters.order_by())
        .limit(filters.limit())
        .offset(filters.offset())
    )


class MovieRepository:
    """
    Data access for the movies table.

    The repository keeps no per-call state and may be shared between threads;
    each call opens its own session from the manager's pool.
    """

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        """
        Args:
            db_manager: Connection manager (default: the global instance)
        """
        self.db = db_manager or get_db_manager()

    def insert(self, movie: Movie) -> Movie:
        """
        Insert a new movie.

        Any id, created_at or version already set on the movie are ignored
        and replaced with the values the database assigns.

        Args:
            movie: Movie with title, year, runtime and genres populated

        Returns:
            The same movie, hydrated with id, created_at and version
        """
        stmt = (
            insert(Movie)
            .values(
                title=movie.title,
                year=movie.year,
                runtime=movie.runtime,
                genres=list(movie.genres),
            )
            .returning(Movie.id, Movie.created_at, Movie.version)
        )

        with self.db.session_scope() as session:
            with query_deadline(session, self.db.query_timeout):
                row = session.execute(stmt).one()

        movie.id, movie.created_at, movie.version = row.id, row.created_at, row.version
        logger.debug("Inserted movie %s (version %s)", movie.id, movie.version)
        return movie

    def get(self, movie_id: int) -> Movie:
        """
        Get a movie by ID.

        Args:
            movie_id: Movie ID

        Returns:
            Movie object

        Raises:
            RecordNotFoundError: If no movie has this ID
        """
        if movie_id < 1:
            raise RecordNotFoundError(movie_id)

        stmt = select(Movie).where(Movie.id == movie_id)

        try:
            with self.db.session_scope() as session:
                with query_deadline(session, self.db.query_timeout):
                    movie = session.execute(stmt).scalar_one()
        except NoResultFound:
            logger.info("Movie %s not found", movie_id)
            raise RecordNotFoundError(movie_id) from None

        return movie

    def update(self, movie: Movie) -> Movie:
        """
        Write a movie's fields back if its version is still current.

        The check and the write are one conditional statement; on success the
        stored version is incremented and copied onto the movie.

        Args:
            movie: Movie carrying its ID, the version it was read at, and the
                new title, year, runtime and genres

        Returns:
            The same movie with its new version

        Raises:
            EditConflictError: If the stored version no longer matches
        """
        stmt = (
            update(Movie)
            .where(Movie.id == movie.id, Movie.version == movie.version)
            .values(
                title=movie.title,
                year=movie.year,
                runtime=movie.runtime,
                genres=list(movie.genres),
                version=Movie.version + 1,
            )
            .returning(Movie.version)
            .execution_options(synchronize_session=False)
        )

        try:
            with self.db.session_scope() as session:
                with query_deadline(session, self.db.query_timeout):
                    new_version = session.execute(stmt).scalar_one()
        except NoResultFound:
            logger.info("Edit conflict on movie %s at version %s", movie.id, movie.version)
            raise EditConflictError(movie.id, movie.version) from None

        movie.version = new_version
        logger.debug("Updated movie %s to version %s", movie.id, movie.version)
        return movie

    def delete(self, movie_id: int) -> None:
        """
        Delete a movie.

        Args:
            movie_id: Movie ID

        Raises:
            RecordNotFoundError: If no movie has this ID
        """
        if movie_id < 1:
            raise RecordNotFoundError(movie_id)

        stmt = (
            delete(Movie)
            .where(Movie.id == movie_id)
            .execution_options(synchronize_session=False)
        )

        with self.db.session_scope() as session:
            with query_deadline(session, self.db.query_timeout):
                result = session.execute(stmt)
                rows_affected = result.rowcount

        if rows_affected == 0:
            logger.info("Movie %s not found for delete", movie_id)
            raise RecordNotFoundError(movie_id)

        logger.debug("Deleted movie %s", movie_id)

    def search(
        self,
        title: str = "",
        genres: Sequence[str] = (),
        filters: Optional[Filters] = None
    ) -> List[Movie]:
        """
        Search movies by title words and genres, one page at a time.

        Args:
            title: Words that must all appear in the title (empty matches all)
            genres: Genres every result must have (empty matches all)
            filters: Page, page size and sort key (default: first page by id)

        Returns:
            List of Movie objects, empty when nothing matches
        """
        filters = filters or Filters()
        stmt = search_statement(title, genres, filters)

        with self.db.session_scope() as session:
            with query_deadline(session, self.db.query_timeout):
                movies = list(session.execute(stmt).scalars().all())

        logger.debug(
            "Search title=%r genres=%r page=%s returned %s movies",
            title, list(genres), filters.page, len(movies)
        )
        return movies
