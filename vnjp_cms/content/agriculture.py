from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from pymongo.database import Database

from vnjp_cms import schema
from vnjp_cms.config import Config
from vnjp_cms.models import Agriculture, AgricultureItem
from vnjp_cms.util.forms import Files
from vnjp_cms.util.query import ListQuery

from . import parents
from .tags import find_tag_by_name


AGRICULTURE = parents.ParentSpec(
    name="agriculture",
    collection=schema.AGRICULTURES,
    item_collection=schema.AGRICULTURE_ITEMS,
    model=Agriculture,
    item_model=AgricultureItem,
    ref_field="agriculture",
    upload_folder="agricultures",
    cache_prefix=lambda cfg: cfg.AGRICULTURE_KEY,
    item_file_fields=("image", "video", "pdf"),
    detail_keys=("agricultureDetail", "agricultureVi", "agricultureJp"),
)

_ALLOWED = ("visible", "day", "createdAt", "updatedAt")


def create_agriculture(db: Database, cfg: Config, fields: Dict[str, Any], files: Files) -> Dict[str, Any]:
    return parents.create_parent(db, cfg, AGRICULTURE, fields, files)


def update_agriculture(db: Database, cfg: Config, store: Any, agriculture_id: str, fields: Dict[str, Any], files: Files) -> Dict[str, Any]:
    _, new = parents.update_parent(db, cfg, store, AGRICULTURE, agriculture_id, fields, files)
    return new


def delete_agriculture(db: Database, cfg: Config, store: Any, agriculture_id: str) -> None:
    parents.delete_parent(db, cfg, store, AGRICULTURE, agriculture_id)


def create_agriculture_item(db: Database, cfg: Config, store: Any, lang: str, agriculture_id: str, fields: Dict[str, Any], files: Files) -> Dict[str, Any]:
    return parents.create_item(db, cfg, store, AGRICULTURE, lang, agriculture_id, fields, files)


def update_agriculture_item(db: Database, cfg: Config, store: Any, agriculture_id: str, item_id: str, fields: Dict[str, Any], files: Files) -> Dict[str, Any]:
    return parents.update_item(db, cfg, store, AGRICULTURE, agriculture_id, item_id, fields, files)


def delete_agriculture_item(db: Database, cfg: Config, store: Any, agriculture_id: str, item_id: str) -> None:
    parents.delete_item(db, cfg, store, AGRICULTURE, agriculture_id, item_id)


def get_agriculture_item(db: Database, item_id: str) -> Dict[str, Any]:
    return parents.get_item(db, AGRICULTURE, item_id)


def agriculture_detail(db: Database, agriculture_id: str) -> Dict[str, Any]:
    """The article plus its tag documents, resolved by name in each language."""
    doc = parents.get_parent(db, AGRICULTURE, agriculture_id)
    resolved: Dict[str, List[Any]] = {}
    for lang in parents.LANGS:
        tags = []
        for name in (doc.get(lang) or {}).get("tag") or []:
            tag = find_tag_by_name(db, lang, name)
            if tag is not None:
                tags.append(tag)
        resolved[lang] = tags
    return {"agriculture": doc, "viTag": resolved["vi"], "jpTag": resolved["jp"]}


def agriculture_detail_full(db: Database, cfg: Config, store: Any, agriculture_id: str) -> str:
    return parents.detail_full(db, cfg, store, AGRICULTURE, agriculture_id)


def list_agricultures(
    db: Database,
    params: Sequence[Tuple[str, str]],
    *,
    lang: Optional[str] = None,
    tag: Optional[str] = None,
) -> Tuple[int, List[Dict[str, Any]]]:
    """List articles, optionally only those carrying `tag` in language `lang`."""
    base: Dict[str, Any] = {}
    if tag:
        base = {f"{parents.check_lang(lang or 'vi')}.tag": tag}
    query = ListQuery(
        search_fields=("vi.title", "jp.title"),
        allowed_fields=_ALLOWED,
        date_fields=("day", "createdAt", "updatedAt"),
        base_filter=base,
    )
    return query.run(db[schema.AGRICULTURES], params)
