"""
Search predicates for the movies table.

Both predicates render to native operators on PostgreSQL. On SQLite they
render to SQL functions that ``register_sqlite_functions`` installs on each
new connection, so the same statements run in development and tests.
"""

import json
import re

from sqlalchemy import Boolean, bindparam
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement


SQLITE_TITLE_MATCHES = "moviedb_title_matches"
SQLITE_GENRES_CONTAIN = "moviedb_genres_contain"

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


class title_matches(FunctionElement):
    """Full-text match of a title column against plain search terms."""
    type = Boolean()
    inherit_cache = True
    name = "title_matches"


class genres_contain(FunctionElement):
    """True when the genre column holds every requested genre."""
    type = Boolean()
    inherit_cache = True
    name = "genres_contain"

    def __init__(self, column, genres, **kwargs):
        # Bind with the column's own type so the list is encoded per dialect
        super().__init__(
            column,
            bindparam(None, list(genres), type_=column.type, unique=True),
            **kwargs
        )


@compiles(title_matches, "postgresql")
def _pg_title_matches(element, compiler, **kw):
    column, terms = list(element.clauses)
    return "to_tsvector('simple', %s) @@ plainto_tsquery('simple', %s)" % (
        compiler.process(column, **kw),
        compiler.process(terms, **kw),
    )


@compiles(title_matches, "sqlite")
def _sqlite_title_matches(element, compiler, **kw):
    return "%s(%s)" % (SQLITE_TITLE_MATCHES, compiler.process(element.clauses, **kw))


@compiles(genres_contain, "postgresql")
def _pg_genres_contain(element, compiler, **kw):
    column, genres = list(element.clauses)
    return "%s @> %s" % (
        compiler.process(column, **kw),
        compiler.process(genres, **kw),
    )


@compiles(genres_contain, "sqlite")
def _sqlite_genres_contain(element, compiler, **kw):
    return "%s(%s)" % (SQLITE_GENRES_CONTAIN, compiler.process(element.clauses, **kw))


def tokenize(value):
    """Split text into lowercase word tokens, like the 'simple' configuration."""
    if not value:
        return []
    return _TOKEN_RE.findall(value.lower())


def _title_matches(title, terms):
    wanted = tokenize(terms)
    if not wanted:
        # An empty tsquery matches nothing
        return 0
    return int(set(wanted) <= set(tokenize(title)))


def _genres_contain(stored, wanted):
    stored = json.loads(stored) if stored else []
    wanted = json.loads(wanted) if wanted else []
    return int(set(wanted) <= set(stored))


def register_sqlite_functions(dbapi_conn, connection_record=None):
    """
    Install the search functions on a raw sqlite3 connection.

    Suitable as a ``connect`` event listener.
    """
    dbapi_conn.create_function(SQLITE_TITLE_MATCHES, 2, _title_matches, deterministic=True)
    dbapi_conn.create_function(SQLITE_GENRES_CONTAIN, 2, _genres_contain, deterministic=True)
