"""
Integration test conftest -- seeded test database, FastAPI TestClient and
an authenticated session.
"""
import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Force SQLite for integration tests
os.environ["DATABASE_URL"] = ""
os.environ["DATA_BACKEND"] = "sql"

from starlette.testclient import TestClient

from __mocks__.fixtures import TEST_ACCESS_TOKEN, TEST_USER, make_lines

# 125 January 2024 invoices: 100 on Main Branch, 25 on North Branch
SEEDED_LINES = 125
NORTH_BRANCH_LINES = 25


@pytest.fixture(scope="session")
def test_db(tmp_path_factory):
    """Initialize and seed a fresh SQLite test database."""
    import bizdash.database as database_mod

    test_db_path = tmp_path_factory.mktemp("db") / "bizdash_integration.db"
    original_path = database_mod.DATABASE_PATH
    database_mod.DATABASE_PATH = test_db_path

    database_mod.init_database()
    database_mod.insert_invoice_lines(make_lines(SEEDED_LINES))

    yield test_db_path

    database_mod.DATABASE_PATH = original_path


@pytest.fixture(scope="session")
def client(test_db):
    """Create a TestClient for the FastAPI app."""
    from bizdash.main import app
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture(autouse=True)
def clear_cookie_jar(request):
    """A successful /login leaves its cookie in the shared client's jar."""
    if "client" in request.fixturenames:
        request.getfixturevalue("client").cookies.clear()
    yield


@pytest.fixture
def auth_cookies(monkeypatch):
    """Cookies for a signed-in user whose token Supabase would accept."""
    import bizdash.dependencies as deps
    from bizdash.auth import serialize_session
    from bizdash.config import SESSION_COOKIE_NAME

    def fake_validate(access_token):
        return dict(TEST_USER) if access_token == TEST_ACCESS_TOKEN else None

    monkeypatch.setattr(deps, "validate_session", fake_validate)
    return {SESSION_COOKIE_NAME: serialize_session(TEST_ACCESS_TOKEN)}


@pytest.fixture
def with_optimized_view(test_db):
    """Install the optimized view for one test."""
    from bizdash.database import install_optimized_objects, drop_optimized_objects

    install_optimized_objects()
    yield
    drop_optimized_objects()
