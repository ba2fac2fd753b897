"""Per-year news counters (drives the year filter on the public news page)."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

from pymongo.database import Database

from vnjp_cms import schema
from vnjp_cms.models import Year
from vnjp_cms.util.query import ListQuery


_YEAR_QUERY = ListQuery(allowed_fields=("year", "isActive", "totalNews"))


def increment_year(db: Database, year: int) -> None:
    row = Year(year=year)
    db[schema.YEARS].update_one(
        {"year": row.year},
        {"$inc": {"totalNews": 1}, "$setOnInsert": {"isActive": row.isActive}},
        upsert=True,
    )


def decrement_year(db: Database, year: int) -> None:
    """Count one news item less; the year disappears when it reaches zero."""
    row = db[schema.YEARS].find_one({"year": int(year)})
    if row is None:
        return
    if int(row.get("totalNews") or 0) > 1:
        db[schema.YEARS].update_one({"_id": row["_id"]}, {"$inc": {"totalNews": -1}})
    else:
        db[schema.YEARS].delete_one({"_id": row["_id"]})


def move_year(db: Database, old_year: int, new_year: int) -> None:
    if int(old_year) == int(new_year):
        return
    decrement_year(db, old_year)
    increment_year(db, new_year)


def list_years(db: Database, params: Sequence[Tuple[str, str]]) -> List[Dict[str, Any]]:
    _, years = _YEAR_QUERY.run(db[schema.YEARS], params)
    return years
