"""Collections whose documents own exactly one uploaded file.

Personnel and customer feedback keep it under `avatar`; partner and
cooperative logos under `image`. The upload always arrives in form field
`file`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple, Type

from pydantic import BaseModel
from pymongo.database import Database

from vnjp_cms import schema
from vnjp_cms.config import Config
from vnjp_cms.db import get_or_404
from vnjp_cms.errors import bad_request
from vnjp_cms.models import Cooperative, Feedback, Partner, Personnel
from vnjp_cms.uploads import remove_file, save_upload
from vnjp_cms.util.forms import Files, first_file
from vnjp_cms.util.query import ListQuery
from vnjp_cms.util.time import utcnow

from .parents import LANGS, validate

UPLOAD_FIELD = "file"
_PENDING = "__pending_upload__"
_DATES = ("createdAt", "updatedAt")


@dataclass(frozen=True)
class MediaSpec:
    name: str
    plural: str
    collection: str
    model: Type[BaseModel]
    file_field: str
    upload_folder: str
    query: ListQuery


PERSONNEL = MediaSpec(
    name="personnel",
    plural="personnels",
    collection=schema.PERSONNELS,
    model=Personnel,
    file_field="avatar",
    upload_folder="personnels",
    query=ListQuery(
        search_fields=("vi.name", "jp.name"),
        allowed_fields=("visible", "createdAt", "updatedAt"),
        date_fields=_DATES,
    ),
)

FEEDBACK = MediaSpec(
    name="feedback",
    plural="feedbacks",
    collection=schema.FEEDBACKS,
    model=Feedback,
    file_field="avatar",
    upload_folder="feedbacks",
    query=ListQuery(
        search_fields=("vi.name", "jp.name"),
        allowed_fields=("visible", "createdAt", "updatedAt"),
        date_fields=_DATES,
    ),
)

PARTNER = MediaSpec(
    name="partner",
    plural="partners",
    collection=schema.PARTNERS,
    model=Partner,
    file_field="image",
    upload_folder="partners",
    query=ListQuery(allowed_fields=("visible", "createdAt", "updatedAt"), date_fields=_DATES),
)

COOPERATIVE = MediaSpec(
    name="cooperative",
    plural="cooperatives",
    collection=schema.COOPERATIVES,
    model=Cooperative,
    file_field="image",
    upload_folder="cooperatives",
    query=ListQuery(allowed_fields=("visible", "createdAt", "updatedAt"), date_fields=_DATES),
)


def _clean(spec: MediaSpec, fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in ("_id", "createdAt", "updatedAt", spec.file_field)}


def create_media(db: Database, cfg: Config, spec: MediaSpec, fields: Dict[str, Any], files: Files) -> Dict[str, Any]:
    upload = first_file(files, UPLOAD_FIELD)
    if upload is None:
        raise bad_request(f"{UPLOAD_FIELD} required.")

    data = _clean(spec, fields)
    data[spec.file_field] = _PENDING
    doc = validate(spec.model, data)

    doc[spec.file_field] = save_upload(cfg, spec.upload_folder, upload)
    doc["_id"] = db[spec.collection].insert_one(doc).inserted_id
    return doc


def update_media(db: Database, cfg: Config, spec: MediaSpec, doc_id: str, fields: Dict[str, Any], files: Files) -> Dict[str, Any]:
    existing = get_or_404(db, spec.collection, doc_id)

    merged = dict(existing)
    for k, v in _clean(spec, fields).items():
        if k in LANGS and isinstance(v, dict):
            merged[k] = {**dict(existing.get(k) or {}), **v}
        else:
            merged[k] = v
    merged["updatedAt"] = utcnow()
    doc = validate(spec.model, merged)

    upload = first_file(files, UPLOAD_FIELD)
    if upload is not None:
        doc[spec.file_field] = save_upload(cfg, spec.upload_folder, upload)

    db[spec.collection].update_one({"_id": existing["_id"]}, {"$set": doc})
    if upload is not None:
        remove_file(existing.get(spec.file_field))
    doc["_id"] = existing["_id"]
    return doc


def delete_media(db: Database, spec: MediaSpec, doc_id: str) -> None:
    existing = get_or_404(db, spec.collection, doc_id)
    db[spec.collection].delete_one({"_id": existing["_id"]})
    remove_file(existing.get(spec.file_field))


def get_media(db: Database, spec: MediaSpec, doc_id: str) -> Dict[str, Any]:
    return get_or_404(db, spec.collection, doc_id)


def list_media(db: Database, spec: MediaSpec, params: Sequence[Tuple[str, str]]) -> Tuple[int, List[Dict[str, Any]]]:
    return spec.query.run(db[spec.collection], params)
