from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection

from vnjp_cms.errors import bad_request
from vnjp_cms.util.forms import split_field_name
from vnjp_cms.util.time import parse_day

# Query-string keys that drive paging/sorting rather than filtering.
CONTROL_KEYS = ("keyword", "limit", "page", "sortBy", "orderBy")
_OPERATORS = ("gt", "gte", "lt", "lte")


def _coerce(value: str, *, numeric: bool = False) -> Any:
    v = value.strip()
    if v == "true":
        return True
    if v == "false":
        return False
    if numeric:
        try:
            return int(v)
        except ValueError:
            try:
                return float(v)
            except ValueError:
                return v
    return v


def _coerce_day(key: str, value: str) -> Any:
    try:
        return parse_day(value)
    except ValueError:
        raise bad_request(f"Invalid date for {key}: {value}")


def _positive_int(value: Optional[str]) -> Optional[int]:
    try:
        n = int(str(value))
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


@dataclass
class ListQuery:
    """Search / filter / sort / paginate for list endpoints.

    Query parameters:
      - keyword: case-insensitive regex over `search_fields`
      - any allowed field: equality (`visible=true`) or range (`year[gte]=2020`);
        values for `date_fields` are parsed as days (`day[gte]=2023/1/1`)
      - sortBy + orderBy (asc|desc)
      - limit + page (1-based)

    Unknown filter keys are ignored.
    """

    search_fields: Sequence[str] = ()
    allowed_fields: Sequence[str] = ()
    date_fields: Sequence[str] = ()
    base_filter: Dict[str, Any] = field(default_factory=dict)

    def build_filter(self, params: Sequence[Tuple[str, str]]) -> Dict[str, Any]:
        clauses: List[Dict[str, Any]] = []
        if self.base_filter:
            clauses.append(dict(self.base_filter))

        keyword = _last(params, "keyword")
        if keyword and self.search_fields:
            pattern = {"$regex": re.escape(keyword), "$options": "i"}
            ors = [{f: pattern} for f in self.search_fields]
            clauses.append(ors[0] if len(ors) == 1 else {"$or": ors})

        for name, value in params:
            parts = split_field_name(name)
            key = parts[0]
            if key in CONTROL_KEYS or key not in self.allowed_fields or key.startswith("$"):
                continue
            is_date = key in self.date_fields
            if len(parts) == 2 and parts[1] in _OPERATORS:
                operand = _coerce_day(key, value) if is_date else _coerce(value, numeric=True)
                clauses.append({key: {f"${parts[1]}": operand}})
            elif len(parts) == 1:
                clauses.append({key: _coerce_day(key, value) if is_date else _coerce(value)})

        if not clauses:
            return {}
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}

    def sort(self, params: Sequence[Tuple[str, str]]) -> Optional[List[Tuple[str, int]]]:
        sort_by = _last(params, "sortBy")
        order_by = _last(params, "orderBy")
        if not sort_by or not order_by:
            return None
        return [(sort_by, DESCENDING if order_by == "desc" else ASCENDING)]

    def run(self, coll: Collection, params: Sequence[Tuple[str, str]]) -> Tuple[int, List[Dict[str, Any]]]:
        """Return (filteredCount, page of documents)."""
        flt = self.build_filter(params)
        filtered_count = coll.count_documents(flt)

        cursor = coll.find(flt)
        sort = self.sort(params)
        if sort:
            cursor = cursor.sort(sort)

        limit = _positive_int(_last(params, "limit"))
        if limit:
            page = _positive_int(_last(params, "page")) or 1
            cursor = cursor.skip(limit * (page - 1)).limit(limit)
        return filtered_count, list(cursor)


def _last(params: Sequence[Tuple[str, str]], key: str) -> Optional[str]:
    found = None
    for k, v in params:
        if k == key:
            found = v
    return found


def query_items(mapping: Mapping[str, Any]) -> List[Tuple[str, str]]:
    """Starlette QueryParams (or a plain dict) as a list of pairs."""
    multi = getattr(mapping, "multi_items", None)
    if callable(multi):
        return list(multi())
    return [(str(k), str(v)) for k, v in mapping.items()]
