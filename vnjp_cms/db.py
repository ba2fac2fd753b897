from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.database import Database

from vnjp_cms.config import Config
from vnjp_cms.errors import not_found
from vnjp_cms.schema import INDEXES


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def connect(cfg: Config, client: Optional[MongoClient] = None) -> Database:
    """Return the configured database.

    MongoClient connects lazily, so this is cheap to call at import time; the
    first query is what actually reaches the server.
    """
    if client is None:
        client = MongoClient(cfg.DB_URI, tz_aware=True, serverSelectionTimeoutMS=5000)
    return client[cfg.DB_NAME]


def init_db(db: Database) -> None:
    """Create indexes. Safe to run repeatedly."""
    _debug(f"Ensuring indexes on {db.name}")
    for collection, specs in INDEXES.items():
        for keys, options in specs:
            db[collection].create_index(keys, **options)


def parse_object_id(value: Any) -> ObjectId:
    """Parse a path id. Malformed ids are treated as missing documents."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise not_found()


def find_by_id(db: Database, collection: str, doc_id: Any) -> Optional[Dict[str, Any]]:
    return db[collection].find_one({"_id": parse_object_id(doc_id)})


def get_or_404(db: Database, collection: str, doc_id: Any) -> Dict[str, Any]:
    doc = find_by_id(db, collection, doc_id)
    if doc is None:
        raise not_found()
    return doc


def to_json(value: Any) -> Any:
    """Convert a Mongo document (or anything nested in one) into JSON-safe values."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def to_json_list(docs: Iterable[Dict[str, Any]]) -> List[Any]:
    return [to_json(d) for d in docs]
