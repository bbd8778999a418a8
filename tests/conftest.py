"""
Root conftest.py -- shared fixtures for all test levels.
"""
import os
import sys
import pytest

# Ensure the package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Force local SQLite with the SQL backend (never hit Supabase or PostgreSQL)
os.environ["DATABASE_URL"] = ""
os.environ["DATA_BACKEND"] = "sql"
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_ANON_KEY"] = ""
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["AUTH_ENABLED"] = "true"


@pytest.fixture(scope="session")
def app():
    """Create the FastAPI app instance for testing."""
    # Must import after env vars are set
    from bizdash.main import app as fastapi_app
    return fastapi_app


@pytest.fixture
def sqlite_db(tmp_path, monkeypatch):
    """A fresh SQLite database with the schema but no optimized view."""
    import bizdash.database as database_mod

    db_path = tmp_path / "bizdash_test.db"
    monkeypatch.setattr(database_mod, "DATABASE_PATH", db_path)
    database_mod.init_database()
    return db_path
