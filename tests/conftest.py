"""
CampConnect - Test Configuration and Fixtures
"""
import os

os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-for-testing"
os.environ["MONGODB_DB"] = "campconnect_test"

import mongomock
import pytest
from faker import Faker
from fastapi.testclient import TestClient

from campconnect.core.auth import create_access_token
from campconnect.db import mongodb
from campconnect.services import chat_service
from campconnect.services.chat_service import MessageHub

fake = Faker()


@pytest.fixture(autouse=True)
def mongo_db():
    """Swap the MongoDB client for an in-memory one, fresh per test."""
    client = mongomock.MongoClient()
    mongodb._client = client
    mongodb._db = client["campconnect_test"]
    yield mongodb._db
    mongodb._client = None
    mongodb._db = None


@pytest.fixture(autouse=True)
def message_hub():
    hub = MessageHub()
    chat_service._message_hub = hub
    yield hub
    chat_service._message_hub = None


@pytest.fixture
def client(mongo_db):
    from campconnect.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(mongo_db):
    """
    Create an account (and by default its profile) directly in the database.

    Returns a dict with id, name, batch, email, token and auth headers.
    """
    def _make(name=None, batch="2nd year", branch="computer-science",
              interests=None, with_profile=True):
        email = fake.unique.email()
        result = mongo_db.accounts.insert_one({
            "email": email,
            "password_hash": "not-used",
            "created_at": mongodb.utcnow(),
        })
        user_id = str(result.inserted_id)
        name = name or fake.name()

        if with_profile:
            mongo_db.users.insert_one({
                "_id": user_id,
                "name": name,
                "batch": batch,
                "branch": branch,
                "interests": interests if interests is not None else ["Web Development"],
                "email": email,
                "created_at": mongodb.utcnow(),
            })

        token = create_access_token({"sub": user_id})
        return {
            "id": user_id,
            "name": name,
            "batch": batch,
            "email": email,
            "token": token,
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _make
