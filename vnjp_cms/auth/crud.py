from __future__ import annotations

from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from vnjp_cms import schema
from vnjp_cms.config import Config
from vnjp_cms.db import to_json
from vnjp_cms.models import User
from vnjp_cms.util.time import utcnow

from .security import hash_password, verify_password


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _oid(user_id: Any) -> Optional[ObjectId]:
    if isinstance(user_id, ObjectId):
        return user_id
    try:
        return ObjectId(str(user_id))
    except (InvalidId, TypeError):
        return None


def public_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    d = dict(doc)
    d.pop("password", None)
    return to_json(d)


def get_user_by_email(db: Database, email: str) -> Optional[Dict[str, Any]]:
    e = normalize_email(email)
    if not e:
        return None
    return db[schema.USERS].find_one({"email": e})


def get_user_by_id(db: Database, user_id: Any) -> Optional[Dict[str, Any]]:
    oid = _oid(user_id)
    if oid is None:
        return None
    return db[schema.USERS].find_one({"_id": oid})


def has_role(user: Dict[str, Any], roles: List[str]) -> bool:
    owned = user.get("role") or []
    if isinstance(owned, str):
        owned = [owned]
    return any(r in owned for r in roles)


def check_password(user: Dict[str, Any], password: str) -> bool:
    return verify_password(password, str(user.get("password") or ""))


def create_user(
    db: Database,
    *,
    name: str,
    email: str,
    password: str,
    role: str = "user",
    verified: bool = False,
) -> Dict[str, Any]:
    """Insert a user (password hashed). Raises ValueError on duplicates / bad input."""
    e = normalize_email(email)
    if not e:
        raise ValueError("email_blank")
    if get_user_by_email(db, e) is not None:
        raise ValueError("email_exists")

    try:
        user = User(
            name=name,
            email=e,
            password=hash_password(password),
            verified=verified,
            role=[role],
        )
    except ValidationError as exc:
        raise ValueError(f"invalid_user: {exc.errors()[0].get('msg')}")

    doc = user.to_doc()
    try:
        doc["_id"] = db[schema.USERS].insert_one(doc).inserted_id
    except DuplicateKeyError:
        raise ValueError("email_exists")
    return doc


def set_password(db: Database, user_id: Any, new_password: str) -> None:
    db[schema.USERS].update_one(
        {"_id": _oid(user_id)},
        {"$set": {"password": hash_password(new_password), "updatedAt": utcnow()}},
    )


def mark_verified(db: Database, user_id: Any) -> None:
    db[schema.USERS].update_one({"_id": _oid(user_id)}, {"$set": {"verified": True}})


# Fields an admin may change through /auth/update/{id}.
_EDITABLE = ("name", "phone", "birthday", "gender", "avatar", "role", "verified")


def update_user(db: Database, user: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Apply admin edits, re-validating the whole document."""
    merged = dict(user)
    for k in _EDITABLE:
        if k in changes:
            merged[k] = changes[k]
    validated = User.model_validate(merged).to_doc()
    updates = {k: validated[k] for k in _EDITABLE}
    updates["updatedAt"] = utcnow()
    db[schema.USERS].update_one({"_id": user["_id"]}, {"$set": updates})
    merged.update(updates)
    return merged


def delete_user(db: Database, user_id: Any) -> None:
    db[schema.USERS].delete_one({"_id": _oid(user_id)})


def bootstrap_admin_if_needed(db: Database, cfg: Config) -> Optional[Dict[str, Any]]:
    """Create the first (verified) admin if the users collection is empty.

    - AUTH_BOOTSTRAP_ADMIN_EMAIL
    - AUTH_BOOTSTRAP_ADMIN_PASSWORD

    Does nothing unless both are set.
    """
    if db[schema.USERS].estimated_document_count() > 0:
        return None

    email = normalize_email(cfg.AUTH_BOOTSTRAP_ADMIN_EMAIL)
    password = cfg.AUTH_BOOTSTRAP_ADMIN_PASSWORD
    if not email or not password:
        return None

    u = create_user(db, name="Administrator", email=email, password=password, role="admin", verified=True)
    _debug(f"Bootstrapped initial admin user: email={email}")
    return public_user(u)
