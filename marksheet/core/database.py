from typing import Optional

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from marksheet.core.config import CONFIG
from marksheet.core.logger import get_logger

logger = get_logger("database")

USERS = "users"
STUDENTS = "students"
MARKS = "marks"

_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    # MongoClient connects lazily, so building it never blocks on the server
    global _client
    if _client is None:
        _client = MongoClient(CONFIG.MONGO_URI)
        logger.info("MongoDB client created for database '%s'", CONFIG.DB_NAME)
    return _client


def get_database() -> Database:
    """FastAPI dependency returning the application database."""
    return get_client()[CONFIG.DB_NAME]


def ensure_indexes(db: Database) -> None:
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[STUDENTS].create_index([("email", ASCENDING)], unique=True)
    db[STUDENTS].create_index([("student_id", ASCENDING)], unique=True)
    db[MARKS].create_index([
        ("student_id", ASCENDING),
        ("subject", ASCENDING),
        ("semester", ASCENDING),
        ("academic_year", ASCENDING),
    ])
    db[MARKS].create_index([("teacher_id", ASCENDING)])


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB client closed")
