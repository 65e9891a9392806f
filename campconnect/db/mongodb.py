"""
MongoDB Connection Utility

MongoDB stores everything:
- accounts: sign-in identities (email + password hash)
- users: one profile per account, keyed by the account id
- questions / answers: the Q&A board, answers keyed by question_id
- messages: direct messages, keyed by thread_id

Alumni records are static seed data and have no collection yet.
"""
import logging
from contextlib import contextmanager
from datetime import datetime

from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import OperationFailure, PyMongoError

from campconnect.core.config import get_settings
from campconnect.core.errors import BackendUnavailableError, PermissionDeniedError

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None

# MongoDB error code for "not authorized on <db> to execute command"
UNAUTHORIZED_CODE = 13


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the campconnect database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning(f"MongoDB connection failed: {e}")
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "accounts": "accounts",
    "users": "users",
    "questions": "questions",
    "answers": "answers",
    "messages": "messages",
}


def init_mongo_indexes():
    """
    Create indexes for the per-screen queries.
    Call this once during app startup.
    """
    db = get_mongo_db()

    db[COLLECTIONS["accounts"]].create_index("email", unique=True)

    # Board: newest questions first, answers fetched per question
    db[COLLECTIONS["questions"]].create_index([("created_at", DESCENDING)])
    db[COLLECTIONS["answers"]].create_index("question_id")

    # Chat: one thread's messages in timestamp order
    db[COLLECTIONS["messages"]].create_index([
        ("thread_id", ASCENDING),
        ("timestamp", ASCENDING)
    ])

    logger.info("MongoDB indexes created successfully")


# ============================================================
# HELPERS
# ============================================================

def utcnow() -> datetime:
    """
    Naive UTC now, truncated to milliseconds.

    MongoDB stores millisecond precision and hands back naive datetimes, so
    values built in memory compare and sort exactly like the stored ones.
    """
    now = datetime.utcnow()
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to a JSON-friendly dict with a string `id`."""
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def serialize_docs(docs) -> list:
    return [serialize_doc(doc) for doc in docs]


@contextmanager
def backend_call(action: str):
    """
    Wrap a single backend operation.

    Maps driver errors onto the error taxonomy so the API answers with a
    notification instead of a stack trace. Nothing is retried.

    Usage:
        with backend_call("fetch users"):
            docs = list(collection.find())
    """
    try:
        yield
    except OperationFailure as e:
        logger.warning(f"Backend refused '{action}': {e}")
        if e.code == UNAUTHORIZED_CODE:
            raise PermissionDeniedError(
                "Permission denied. Please check database access rules."
            ) from e
        raise BackendUnavailableError(title=f"Failed to {action}") from e
    except PyMongoError as e:
        logger.warning(f"Backend unavailable during '{action}': {e}")
        raise BackendUnavailableError(title=f"Failed to {action}") from e
