"""
Database helpers

Thin pymongo layer used by the API. Collections are addressed by name
(lowercase entity name, e.g. "bulkquote"). Every helper resolves the
database at call time through ``get_db()`` so the module-level ``db`` can be
swapped out (tests point it at an in-memory client).
"""
import logging
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.database import Database

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "site")

# MongoClient connects lazily; nothing touches the server until the first query.
client = MongoClient(DATABASE_URL)
db: Database = client[DATABASE_NAME]

Sort = Sequence[Tuple[str, int]]


def get_db() -> Database:
    return db


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id coming from a URL or body; None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def serialize(doc: Optional[dict]) -> Optional[dict]:
    """Render ObjectIds as strings so the document is JSON friendly."""
    if doc is None:
        return None
    out = {}
    for key, value in doc.items():
        if isinstance(value, ObjectId):
            value = str(value)
        elif isinstance(value, list):
            value = [str(v) if isinstance(v, ObjectId) else v for v in value]
        out[key] = value
    return out


def _as_dict(data: Any) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


def create_document(collection_name: str, data: Any) -> dict:
    """Insert one document and return it (with its new ``_id``)."""
    doc = _as_dict(data)
    result = get_db()[collection_name].insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


def create_documents(collection_name: str, items: Sequence[Any]) -> List[ObjectId]:
    docs = [_as_dict(item) for item in items]
    if not docs:
        return []
    return list(get_db()[collection_name].insert_many(docs).inserted_ids)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[Sort] = None,
) -> List[dict]:
    """Find documents ordered by ``sort``, with ``_id`` descending as the final tie-break."""
    cursor = get_db()[collection_name].find(filter_dict or {})
    order = list(sort or [])
    if not any(field == "_id" for field, _ in order):
        order.append(("_id", DESCENDING))
    return list(cursor.sort(order))


def find_document(collection_name: str, filter_dict: Dict[str, Any]) -> Optional[dict]:
    return get_db()[collection_name].find_one(filter_dict)


def get_document(collection_name: str, doc_id: Any) -> Optional[dict]:
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    return get_db()[collection_name].find_one({"_id": oid})


def update_document(collection_name: str, doc_id: Any, changes: Dict[str, Any]) -> Optional[dict]:
    """Apply ``$set`` to one document; returns the updated document or None if missing."""
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    if not changes:
        return get_db()[collection_name].find_one({"_id": oid})
    return get_db()[collection_name].find_one_and_update(
        {"_id": oid},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )


def delete_document(collection_name: str, doc_id: Any) -> Optional[dict]:
    """Physically delete one document; returns what was deleted or None."""
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    return get_db()[collection_name].find_one_and_delete({"_id": oid})


def delete_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None) -> int:
    return get_db()[collection_name].delete_many(filter_dict or {}).deleted_count


def ensure_indexes() -> None:
    """Unique email on users; closes the register check-then-insert race."""
    get_db()["user"].create_index([("email", ASCENDING)], unique=True)
    logger.info("Ensured unique index on user.email")
