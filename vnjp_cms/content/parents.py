"""Parent documents with per-language ordered lists of child items (news, agriculture).

A parent looks like

    {visible, day, vi: {poster, ..., <refs>: [{id}]}, jp: {...}, createdAt, updatedAt}

and each `{id}` points at a document in the item collection. The assembled
"full detail" (parent + resolved children) is cached in Redis and dropped on
any write to the parent or its children.

Nothing here is transactional: a failure half way through a multi-document
delete leaves whatever was already removed removed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from bson import ObjectId
from pydantic import BaseModel, ValidationError
from pymongo.database import Database

from vnjp_cms.cache import DetailCache
from vnjp_cms.config import Config
from vnjp_cms.db import get_or_404, parse_object_id, to_json
from vnjp_cms.errors import bad_request, not_found, validation_message
from vnjp_cms.uploads import remove_file, remove_files, save_upload, save_uploads
from vnjp_cms.util.forms import Files, first_file
from vnjp_cms.util.time import utcnow

LANGS = ("vi", "jp")
_POSTER_FIELDS = {"vi": "viPoster", "jp": "jpPoster"}
_PENDING = "__pending_upload__"


def _debug(msg: str) -> None:
    print(f"[content] {msg}")


@dataclass(frozen=True)
class ParentSpec:
    name: str
    collection: str
    item_collection: str
    model: Type[BaseModel]
    item_model: Type[BaseModel]
    ref_field: str
    upload_folder: str
    cache_prefix: Callable[[Config], str]
    # Child fields backed by a single uploaded file (form field name == document field).
    item_file_fields: Tuple[str, ...]
    # Child field holding a list of `{url}` uploads, and its form field name.
    item_group_field: Optional[str] = None
    item_group_form_field: Optional[str] = None
    # Keys of the full-detail payload: (parent, vi children, jp children)
    detail_keys: Tuple[str, str, str] = ("detail", "vi", "jp")


def validate(model: Type[BaseModel], data: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return model.model_validate(data).to_doc()
    except ValidationError as e:
        raise bad_request(validation_message(e))


def cache_for(spec: ParentSpec, cfg: Config, store: Any) -> DetailCache:
    return DetailCache(store, spec.cache_prefix(cfg))


def check_lang(lang: str) -> str:
    if lang not in LANGS:
        raise bad_request("Language must be vi or jp.")
    return lang


def _merge(existing: Dict[str, Any], changes: Dict[str, Any], protected: Tuple[str, ...]) -> Dict[str, Any]:
    """Body fields override the document; language sub-documents merge key by key."""
    merged = dict(existing)
    for k, v in changes.items():
        if k in ("_id", "createdAt", "updatedAt"):
            continue
        if k in LANGS and isinstance(v, dict):
            lang_doc = dict(existing.get(k) or {})
            lang_doc.update({lk: lv for lk, lv in v.items() if lk not in protected})
            merged[k] = lang_doc
        else:
            merged[k] = v
    return merged


def _set_fields(spec: ParentSpec, doc: Dict[str, Any]) -> Dict[str, Any]:
    """`$set` paths for a parent update; item reference lists are left to `$push`/`$pull`."""
    updates: Dict[str, Any] = {}
    for k, v in doc.items():
        if k == "_id":
            continue
        if k in LANGS and isinstance(v, dict):
            for lk, lv in v.items():
                if lk != spec.ref_field:
                    updates[f"{k}.{lk}"] = lv
        else:
            updates[k] = v
    return updates


def item_ids(parent: Dict[str, Any], spec: ParentSpec, lang: str) -> List[ObjectId]:
    refs = (parent.get(lang) or {}).get(spec.ref_field) or []
    return [r["id"] for r in refs if isinstance(r, dict) and r.get("id") is not None]


def item_files(spec: ParentSpec, item: Dict[str, Any]) -> List[Optional[str]]:
    paths: List[Optional[str]] = [item.get(f) for f in spec.item_file_fields]
    if spec.item_group_field:
        paths.extend(g.get("url") for g in (item.get(spec.item_group_field) or []) if isinstance(g, dict))
    return paths


# -----------------------------
# Parent documents
# -----------------------------


def create_parent(db: Database, cfg: Config, spec: ParentSpec, fields: Dict[str, Any], files: Files) -> Dict[str, Any]:
    """Insert a parent; both language posters are required.

    Input is validated before any file is written, so a rejected request
    leaves neither a document nor stray uploads behind.
    """
    posters = {lang: first_file(files, _POSTER_FIELDS[lang]) for lang in LANGS}
    missing = [_POSTER_FIELDS[lang] for lang in LANGS if posters[lang] is None]
    if missing:
        raise bad_request(f"{' and '.join(missing)} required.")

    data = dict(fields)
    for lang in LANGS:
        lang_doc = {k: v for k, v in dict(data.get(lang) or {}).items() if k != spec.ref_field}
        lang_doc["poster"] = _PENDING
        lang_doc[spec.ref_field] = []
        data[lang] = lang_doc
    data.pop("_id", None)
    data["createdAt"] = utcnow()
    data.pop("updatedAt", None)
    doc = validate(spec.model, data)

    for lang in LANGS:
        doc[lang]["poster"] = save_upload(cfg, spec.upload_folder, posters[lang])

    doc["_id"] = db[spec.collection].insert_one(doc).inserted_id
    _debug(f"Created {spec.name} {doc['_id']}")
    return doc


def update_parent(
    db: Database,
    cfg: Config,
    store: Any,
    spec: ParentSpec,
    parent_id: str,
    fields: Dict[str, Any],
    files: Files,
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Merge body fields, swap posters that were re-uploaded. Returns (old, new)."""
    existing = get_or_404(db, spec.collection, parent_id)
    cache = cache_for(spec, cfg, store)
    cache.invalidate(existing["_id"])

    merged = _merge(existing, fields, protected=("poster", spec.ref_field))
    merged["updatedAt"] = utcnow()
    doc = validate(spec.model, merged)

    old_posters: List[str] = []
    for lang in LANGS:
        upload = first_file(files, _POSTER_FIELDS[lang])
        if upload is not None:
            old_posters.append((existing.get(lang) or {}).get("poster"))
            doc[lang]["poster"] = save_upload(cfg, spec.upload_folder, upload)

    db[spec.collection].update_one({"_id": existing["_id"]}, {"$set": _set_fields(spec, doc)})
    cache.invalidate(existing["_id"])
    remove_files(old_posters)
    doc["_id"] = existing["_id"]
    return existing, doc


def delete_parent(db: Database, cfg: Config, store: Any, spec: ParentSpec, parent_id: str) -> Dict[str, Any]:
    """Delete a parent, its posters, every child item and the children's files."""
    existing = get_or_404(db, spec.collection, parent_id)
    cache = cache_for(spec, cfg, store)
    cache.invalidate(existing["_id"])

    for lang in LANGS:
        remove_file((existing.get(lang) or {}).get("poster"))

    removed = 0
    for lang in LANGS:
        for oid in item_ids(existing, spec, lang):
            item = db[spec.item_collection].find_one({"_id": oid})
            if item is None:
                continue
            remove_files(item_files(spec, item))
            db[spec.item_collection].delete_one({"_id": oid})
            removed += 1

    db[spec.collection].delete_one({"_id": existing["_id"]})
    cache.invalidate(existing["_id"])
    _debug(f"Deleted {spec.name} {existing['_id']} with {removed} item(s)")
    return existing


def get_parent(db: Database, spec: ParentSpec, parent_id: str) -> Dict[str, Any]:
    return get_or_404(db, spec.collection, parent_id)


def detail_full(db: Database, cfg: Config, store: Any, spec: ParentSpec, parent_id: str) -> str:
    """Serialized `{detail, vi items, jp items}`, served from the cache when present.

    A cache hit returns the stored JSON verbatim without touching MongoDB.
    """
    oid = parse_object_id(parent_id)
    cache = cache_for(spec, cfg, store)
    raw = cache.get(oid)
    if raw is not None:
        return raw

    parent = db[spec.collection].find_one({"_id": oid})
    if parent is None:
        raise not_found()

    detail_key, vi_key, jp_key = spec.detail_keys
    payload: Dict[str, Any] = {detail_key: to_json(parent)}
    for lang, key in (("vi", vi_key), ("jp", jp_key)):
        children: List[Any] = []
        for item_id in item_ids(parent, spec, lang):
            item = db[spec.item_collection].find_one({"_id": item_id})
            if item is not None:
                children.append(to_json(item))
        payload[key] = children
    return cache.put(oid, payload)


# -----------------------------
# Child items
# -----------------------------


def _item_group_uploads(spec: ParentSpec, files: Files) -> list:
    if not spec.item_group_form_field:
        return []
    return list(files.get(spec.item_group_form_field) or [])


def create_item(
    db: Database,
    cfg: Config,
    store: Any,
    spec: ParentSpec,
    lang: str,
    parent_id: str,
    fields: Dict[str, Any],
    files: Files,
) -> Dict[str, Any]:
    """Insert a child item and append its reference to the parent's `lang` list."""
    check_lang(lang)
    parent = get_or_404(db, spec.collection, parent_id)
    cache = cache_for(spec, cfg, store)
    cache.invalidate(parent["_id"])

    data = {k: v for k, v in fields.items() if k != "_id" and k not in spec.item_file_fields}
    if spec.item_group_field:
        data.pop(spec.item_group_field, None)
    doc = validate(spec.item_model, data)

    for f in spec.item_file_fields:
        upload = first_file(files, f)
        if upload is not None:
            doc[f] = save_upload(cfg, spec.upload_folder, upload)
    if spec.item_group_field:
        doc[spec.item_group_field] = [
            {"url": p} for p in save_uploads(cfg, spec.upload_folder, _item_group_uploads(spec, files))
        ]

    doc["_id"] = db[spec.item_collection].insert_one(doc).inserted_id

    db[spec.collection].update_one({"_id": parent["_id"]}, {"$push": {f"{lang}.{spec.ref_field}": {"id": doc["_id"]}}})
    cache.invalidate(parent["_id"])
    return doc


def _owned_item(db: Database, spec: ParentSpec, parent_id: str, item_id: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    parent = get_or_404(db, spec.collection, parent_id)
    item = get_or_404(db, spec.item_collection, item_id)
    if not any(item["_id"] in item_ids(parent, spec, lang) for lang in LANGS):
        raise not_found()
    return parent, item


def update_item(
    db: Database,
    cfg: Config,
    store: Any,
    spec: ParentSpec,
    parent_id: str,
    item_id: str,
    fields: Dict[str, Any],
    files: Files,
) -> Dict[str, Any]:
    """Replace a child item's content.

    File-backed fields: a new upload replaces the old file; echoing the current
    path back keeps it; anything else clears the field and deletes the file.
    A new upload group replaces the whole old group.
    """
    parent, existing = _owned_item(db, spec, parent_id, item_id)
    cache = cache_for(spec, cfg, store)
    cache.invalidate(parent["_id"])

    data = {k: v for k, v in fields.items() if k != "_id" and k not in spec.item_file_fields}
    if spec.item_group_field:
        data.pop(spec.item_group_field, None)
    doc = validate(spec.item_model, data)

    stale: List[Optional[str]] = []
    for f in spec.item_file_fields:
        current = existing.get(f)
        upload = first_file(files, f)
        if upload is not None:
            doc[f] = save_upload(cfg, spec.upload_folder, upload)
            stale.append(current)
        elif current and fields.get(f) == current:
            doc[f] = current
        else:
            doc[f] = None
            stale.append(current)

    if spec.item_group_field:
        uploads = _item_group_uploads(spec, files)
        old_group = list(existing.get(spec.item_group_field) or [])
        if uploads:
            doc[spec.item_group_field] = [{"url": p} for p in save_uploads(cfg, spec.upload_folder, uploads)]
            stale.extend(g.get("url") for g in old_group if isinstance(g, dict))
        else:
            doc[spec.item_group_field] = old_group

    db[spec.item_collection].replace_one({"_id": existing["_id"]}, doc)
    cache.invalidate(parent["_id"])
    remove_files(stale)
    doc["_id"] = existing["_id"]
    return doc


def delete_item(db: Database, cfg: Config, store: Any, spec: ParentSpec, parent_id: str, item_id: str) -> None:
    parent, item = _owned_item(db, spec, parent_id, item_id)
    cache = cache_for(spec, cfg, store)
    cache.invalidate(parent["_id"])

    remove_files(item_files(spec, item))
    db[spec.item_collection].delete_one({"_id": item["_id"]})

    pull = {f"{lang}.{spec.ref_field}": {"id": item["_id"]} for lang in LANGS}
    db[spec.collection].update_one({"_id": parent["_id"]}, {"$pull": pull})
    cache.invalidate(parent["_id"])


def get_item(db: Database, spec: ParentSpec, item_id: str) -> Dict[str, Any]:
    return get_or_404(db, spec.item_collection, item_id)
