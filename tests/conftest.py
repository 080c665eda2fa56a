import mongomock
import pytest
from fastapi.testclient import TestClient

from lifetracker.database import create_document, ensure_indexes, get_db
from lifetracker.main import app
from lifetracker.security import create_access_token, get_password_hash


@pytest.fixture
def db():
    database = mongomock.MongoClient()["lifetracker_test"]
    ensure_indexes(database)
    app.dependency_overrides[get_db] = lambda: database
    yield database
    app.dependency_overrides.clear()


@pytest.fixture
def client(db):
    """Anonymous client."""
    return TestClient(app)


@pytest.fixture
def make_user(db):
    """Create a user directly in the database and return a client logged in as them."""

    def make(username, password="secret123"):
        user = create_document(db, "user", {
            "username": username,
            "password_hash": get_password_hash(password),
        })
        token = create_access_token(str(user["_id"]), username)
        logged_in = TestClient(app, cookies={"token": token})
        logged_in.user_id = str(user["_id"])
        return logged_in

    return make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")
