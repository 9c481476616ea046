"""
MongoDB access for the PlayApp backend.

Collections follow the lowercase class name of the schema they store:

- User -> user
- Video -> video
- Subscription -> subscription
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from errors import ApiError
from settings import settings

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, tz_aware=True)
    return _client


def get_db() -> Database:
    """FastAPI dependency returning the application database."""
    return get_client()[settings.db_name]


def ensure_indexes(db: Database) -> None:
    db["user"].create_index([("username", ASCENDING)], unique=True)
    db["user"].create_index([("email", ASCENDING)], unique=True)
    db["user"].create_index([("fullname", ASCENDING)])
    db["video"].create_index([("owner", ASCENDING)])
    # No uniqueness on (subscriber, channel): duplicate edges are allowed
    db["subscription"].create_index([("channel", ASCENDING)])
    db["subscription"].create_index([("subscriber", ASCENDING)])
    logger.info("Indexes ensured on database %s", db.name)


def now() -> datetime:
    return datetime.now(timezone.utc)


def touch(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a $set payload with updatedAt refreshed."""
    return {**fields, "updatedAt": now()}


def create_document(db: Database, collection_name: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a document with createdAt/updatedAt timestamps and return it."""
    stamp = now()
    doc = {**data, "createdAt": stamp, "updatedAt": stamp}
    doc["_id"] = db[collection_name].insert_one(doc).inserted_id
    return doc


def get_documents(
    db: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def objid(id_str: Any) -> ObjectId:
    if isinstance(id_str, ObjectId):
        return id_str
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        raise ApiError(400, "Invalid id format")
