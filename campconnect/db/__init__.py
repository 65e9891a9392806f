"""
Database module - MongoDB connection and helpers.
"""
from campconnect.db.mongodb import (
    get_mongo_db,
    get_collection,
    test_mongo_connection,
    backend_call,
    COLLECTIONS,
)

__all__ = [
    "get_mongo_db",
    "get_collection",
    "test_mongo_connection",
    "backend_call",
    "COLLECTIONS",
]
