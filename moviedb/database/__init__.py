"""
Database module for the movie data layer.

This module provides the Movie model, connection management, the search
filters and the MovieRepository.
"""

from moviedb.database.models import Base, Movie
from moviedb.database.connection import DatabaseManager, get_db_manager
from moviedb.database.errors import RepositoryError, RecordNotFoundError, EditConflictError
from moviedb.database.filters import Filters, SORT_SAFELIST
from moviedb.database.validation import MovieInput, MovieUpdate, validate_movie
from moviedb.database.repository import MovieRepository
from moviedb.database.init_db import init_database, verify_schema

__all__ = [
    # Models
    'Base',
    'Movie',
    # Connection
    'DatabaseManager',
    'get_db_manager',
    # Errors
    'RepositoryError',
    'RecordNotFoundError',
    'EditConflictError',
    # Search parameters
    'Filters',
    'SORT_SAFELIST',
    # Validation
    'MovieInput',
    'MovieUpdate',
    'validate_movie',
    # Repository
    'MovieRepository',
    # Initialization
    'init_database',
    'verify_schema',
]
