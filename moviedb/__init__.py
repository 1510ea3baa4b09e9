"""
Movie data-access package.

This package contains the movie entity, its repository with optimistic
concurrency control and filtered search, database connection management,
and shared utilities.
"""

__version__ = "1.0.0"
