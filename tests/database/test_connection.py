"""
Tests for connection management and schema bootstrap.
"""

import pytest
from sqlalchemy import text
from sqlalchemy.pool import QueuePool, StaticPool

from moviedb.database import connection, init_db
from moviedb.database.connection import DatabaseManager


@pytest.fixture
def db_manager():
    manager = DatabaseManager(database_url="sqlite://", echo=False)
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture
def fresh_global_manager(monkeypatch):
    """Isolate tests from the module-level manager singleton."""
    monkeypatch.setattr(connection, "_db_manager", None)
    yield
    if connection._db_manager is not None:
        connection._db_manager.close()


class TestDatabaseManager:
    """Tests for DatabaseManager."""

    def test_sqlite_uses_configured_timeout(self):
        manager = DatabaseManager(database_url="sqlite://", query_timeout=1.5)
        assert manager.is_sqlite
        assert manager.query_timeout == 1.5
        manager.close()

    def test_timeout_from_environment(self, monkeypatch):
        monkeypatch.setenv("MOVIEDB_QUERY_TIMEOUT", "7")
        manager = DatabaseManager(database_url="sqlite://")
        assert manager.query_timeout == 7.0
        manager.close()

    def test_memory_database_uses_single_connection(self):
        manager = DatabaseManager(database_url="sqlite://")
        assert isinstance(manager.engine.pool, StaticPool)
        manager.close()

    def test_file_database_uses_connection_per_checkout(self, tmp_path):
        manager = DatabaseManager(database_url=f"sqlite:///{tmp_path / 'movies.db'}")
        assert isinstance(manager.engine.pool, QueuePool)
        with manager.engine.connect() as first, manager.engine.connect() as second:
            assert first.connection.driver_connection is not second.connection.driver_connection
        manager.close()

    def test_pool_timeout_capped_by_query_timeout(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DB_POOL_TIMEOUT", "30")
        manager = DatabaseManager(
            database_url=f"sqlite:///{tmp_path / 'movies.db'}",
            query_timeout=0.5
        )
        assert manager.engine.pool.timeout() == 0.5
        manager.close()

    def test_session_scope_commits(self, db_manager):
        with db_manager.session_scope() as session:
            session.execute(text(
                "INSERT INTO movies (title, year, runtime, genres) "
                "VALUES ('Heat', 1995, 170, '[\"crime\"]')"
            ))

        with db_manager.session_scope() as session:
            assert session.execute(text("SELECT count(*) FROM movies")).scalar() == 1

    def test_session_scope_rolls_back_on_error(self, db_manager):
        with pytest.raises(RuntimeError):
            with db_manager.session_scope() as session:
                session.execute(text(
                    "INSERT INTO movies (title, year, runtime, genres) "
                    "VALUES ('Heat', 1995, 170, '[\"crime\"]')"
                ))
                raise RuntimeError("boom")

        with db_manager.session_scope() as session:
            assert session.execute(text("SELECT count(*) FROM movies")).scalar() == 0

    def test_search_functions_registered(self, db_manager):
        with db_manager.session_scope() as session:
            assert session.execute(
                text("SELECT moviedb_title_matches('The Club', 'club')")
            ).scalar() == 1

    def test_sqlite_file_directory_created(self, tmp_path):
        db_file = tmp_path / "nested" / "movies.db"
        manager = DatabaseManager(database_url=f"sqlite:///{db_file}")
        manager.create_tables()
        assert db_file.exists()
        manager.close()

    def test_reset_database(self, db_manager):
        with db_manager.session_scope() as session:
            session.execute(text(
                "INSERT INTO movies (title, year, runtime, genres) "
                "VALUES ('Heat', 1995, 170, '[\"crime\"]')"
            ))
        db_manager.reset_database()
        with db_manager.session_scope() as session:
            assert session.execute(text("SELECT count(*) FROM movies")).scalar() == 0


class TestInitDatabase:
    """Tests for init_database and verify_schema."""

    def test_init_and_verify(self, fresh_global_manager):
        manager = init_db.init_database(database_url="sqlite://")
        assert init_db.verify_schema(manager) is True

    def test_verify_missing_table(self, fresh_global_manager):
        manager = connection.get_db_manager(database_url="sqlite://")
        assert init_db.verify_schema(manager) is False

    def test_get_db_manager_is_singleton(self, fresh_global_manager):
        first = connection.get_db_manager(database_url="sqlite://")
        assert connection.get_db_manager() is first


class TestPackageExports:
    """Tests for the database package's public names."""

    def test_all_exports_resolve(self):
        import moviedb.database as database

        for name in database.__all__:
            assert hasattr(database, name), name

    def test_exports_match_repository_surface(self):
        import moviedb.database as database

        assert 'MovieRepository' in database.__all__
        assert 'get_session' not in database.__all__
        assert not hasattr(connection, 'get_session')
