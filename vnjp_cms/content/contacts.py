"""Company contact blocks (address / phone / email per language).

Exactly one contact is the default shown in the site header and footer:
the first contact becomes default, promoting another contact demotes the
old one, and the current default can be neither unset nor deleted.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

from pymongo.database import Database

from vnjp_cms import schema
from vnjp_cms.db import get_or_404
from vnjp_cms.errors import not_acceptable
from vnjp_cms.models import Contact
from vnjp_cms.util.query import ListQuery
from vnjp_cms.util.time import utcnow

from .parents import LANGS, validate


CONTACT_QUERY = ListQuery(
    search_fields=("vi.address", "jp.address"),
    allowed_fields=("default", "createdAt", "updatedAt"),
    date_fields=("createdAt", "updatedAt"),
)


def _clear_default(db: Database) -> None:
    db[schema.CONTACTS].update_many({}, {"$set": {"default": False}})


def create_contact(db: Database, fields: Dict[str, Any]) -> Dict[str, Any]:
    data = {k: v for k, v in fields.items() if k not in ("_id", "createdAt", "updatedAt")}
    doc = validate(Contact, data)

    if db[schema.CONTACTS].count_documents({}) == 0:
        doc["default"] = True
    elif doc["default"]:
        _clear_default(db)

    doc["_id"] = db[schema.CONTACTS].insert_one(doc).inserted_id
    return doc


def update_contact(db: Database, contact_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    existing = get_or_404(db, schema.CONTACTS, contact_id)

    merged = dict(existing)
    for k, v in fields.items():
        if k in ("_id", "createdAt", "updatedAt"):
            continue
        if k in LANGS and isinstance(v, dict):
            merged[k] = {**dict(existing.get(k) or {}), **v}
        else:
            merged[k] = v
    merged["updatedAt"] = utcnow()
    doc = validate(Contact, merged)

    if existing.get("default") and not doc["default"]:
        raise not_acceptable("The default contact cannot be unset; promote another contact instead.")

    if doc["default"] and not existing.get("default"):
        _clear_default(db)
    if db[schema.CONTACTS].count_documents({}) == 1:
        doc["default"] = True

    db[schema.CONTACTS].update_one({"_id": existing["_id"]}, {"$set": doc})
    doc["_id"] = existing["_id"]
    return doc


def delete_contact(db: Database, contact_id: str) -> None:
    existing = get_or_404(db, schema.CONTACTS, contact_id)
    if existing.get("default"):
        raise not_acceptable("The default contact cannot be deleted.")
    db[schema.CONTACTS].delete_one({"_id": existing["_id"]})


def get_contact(db: Database, contact_id: str) -> Dict[str, Any]:
    return get_or_404(db, schema.CONTACTS, contact_id)


def list_contacts(db: Database, params: Sequence[Tuple[str, str]]) -> Tuple[int, List[Dict[str, Any]]]:
    return CONTACT_QUERY.run(db[schema.CONTACTS], params)
