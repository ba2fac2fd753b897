from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

from pymongo.database import Database

from vnjp_cms import schema
from vnjp_cms.config import Config
from vnjp_cms.models import News, NewsItem
from vnjp_cms.util.forms import Files
from vnjp_cms.util.query import ListQuery
from vnjp_cms.util.time import as_utc

from . import parents
from .years import decrement_year, increment_year, move_year


NEWS = parents.ParentSpec(
    name="news",
    collection=schema.NEWS,
    item_collection=schema.NEWS_ITEMS,
    model=News,
    item_model=NewsItem,
    ref_field="news",
    upload_folder="news",
    cache_prefix=lambda cfg: cfg.NEWS_KEY,
    item_file_fields=("imageCenter", "imageLeft", "imageRight", "video", "pdf"),
    item_group_field="imageGroup",
    item_group_form_field="imageGroup[]",
    detail_keys=("newsDetail", "newsVi", "newsJp"),
)

NEWS_QUERY = ListQuery(
    search_fields=("vi.title", "jp.title"),
    allowed_fields=("visible", "day", "createdAt", "updatedAt"),
    date_fields=("day", "createdAt", "updatedAt"),
)


def _year(doc: Dict[str, Any]) -> int:
    return as_utc(doc["day"]).year


def create_news(db: Database, cfg: Config, fields: Dict[str, Any], files: Files) -> Dict[str, Any]:
    doc = parents.create_parent(db, cfg, NEWS, fields, files)
    increment_year(db, _year(doc))
    return doc


def update_news(db: Database, cfg: Config, store: Any, news_id: str, fields: Dict[str, Any], files: Files) -> Dict[str, Any]:
    old, new = parents.update_parent(db, cfg, store, NEWS, news_id, fields, files)
    move_year(db, _year(old), _year(new))
    return new


def delete_news(db: Database, cfg: Config, store: Any, news_id: str) -> None:
    old = parents.delete_parent(db, cfg, store, NEWS, news_id)
    decrement_year(db, _year(old))


def create_news_item(db: Database, cfg: Config, store: Any, lang: str, news_id: str, fields: Dict[str, Any], files: Files) -> Dict[str, Any]:
    return parents.create_item(db, cfg, store, NEWS, lang, news_id, fields, files)


def update_news_item(db: Database, cfg: Config, store: Any, news_id: str, item_id: str, fields: Dict[str, Any], files: Files) -> Dict[str, Any]:
    return parents.update_item(db, cfg, store, NEWS, news_id, item_id, fields, files)


def delete_news_item(db: Database, cfg: Config, store: Any, news_id: str, item_id: str) -> None:
    parents.delete_item(db, cfg, store, NEWS, news_id, item_id)


def get_news(db: Database, news_id: str) -> Dict[str, Any]:
    return parents.get_parent(db, NEWS, news_id)


def get_news_item(db: Database, item_id: str) -> Dict[str, Any]:
    return parents.get_item(db, NEWS, item_id)


def news_detail_full(db: Database, cfg: Config, store: Any, news_id: str) -> str:
    return parents.detail_full(db, cfg, store, NEWS, news_id)


def list_news(db: Database, params: Sequence[Tuple[str, str]]) -> Tuple[int, List[Dict[str, Any]]]:
    return NEWS_QUERY.run(db[schema.NEWS], params)
