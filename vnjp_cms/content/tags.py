from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from pymongo.database import Database

from vnjp_cms import schema
from vnjp_cms.db import get_or_404
from vnjp_cms.models import Tag
from vnjp_cms.util.query import ListQuery
from vnjp_cms.util.time import utcnow

from .parents import validate


TAG_QUERY = ListQuery(
    search_fields=("vi", "jp"),
    allowed_fields=("visible", "vi", "jp", "createdAt", "updatedAt"),
    date_fields=("createdAt", "updatedAt"),
)


def create_tag(db: Database, fields: Dict[str, Any]) -> Dict[str, Any]:
    data = {k: v for k, v in fields.items() if k not in ("_id", "createdAt", "updatedAt")}
    doc = validate(Tag, data)
    doc["_id"] = db[schema.TAGS].insert_one(doc).inserted_id
    return doc


def update_tag(db: Database, tag_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    existing = get_or_404(db, schema.TAGS, tag_id)
    merged = dict(existing)
    merged.update({k: v for k, v in fields.items() if k not in ("_id", "createdAt")})
    merged["updatedAt"] = utcnow()
    doc = validate(Tag, merged)
    db[schema.TAGS].update_one({"_id": existing["_id"]}, {"$set": doc})
    doc["_id"] = existing["_id"]
    return doc


def delete_tag(db: Database, tag_id: str) -> None:
    existing = get_or_404(db, schema.TAGS, tag_id)
    db[schema.TAGS].delete_one({"_id": existing["_id"]})


def get_tag(db: Database, tag_id: str) -> Dict[str, Any]:
    return get_or_404(db, schema.TAGS, tag_id)


def find_tag_by_name(db: Database, lang: str, name: str) -> Optional[Dict[str, Any]]:
    return db[schema.TAGS].find_one({lang: name})


def list_tags(db: Database, params: Sequence[Tuple[str, str]]) -> Tuple[int, List[Dict[str, Any]]]:
    return TAG_QUERY.run(db[schema.TAGS], params)
