from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from fastapi import Request
from starlette.datastructures import UploadFile

from vnjp_cms.errors import bad_request

_NAME_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_PART_RE = re.compile(r"\[([^\[\]]*)\]")

Files = Dict[str, List[UploadFile]]


def split_field_name(name: str) -> List[str]:
    """`vi[tag][]` -> ["vi", "tag", ""]. Names that don't parse are kept whole."""
    m = _NAME_RE.match(name)
    if not m:
        return [name]
    return [m.group(1)] + _PART_RE.findall(m.group(2))


def _assign(root: Dict[str, Any], keys: List[str], value: Any) -> None:
    cur: Dict[str, Any] = root
    for i, key in enumerate(keys):
        last = i == len(keys) - 1
        if key == "":
            # `[]` appends: use the next free numeric slot at this level.
            key = str(sum(1 for k in cur if k.isdigit()))
        if last:
            if key in cur and not isinstance(cur[key], dict):
                prev = cur[key]
                cur[key] = (prev if isinstance(prev, list) else [prev]) + [value]
            else:
                cur[key] = value
            return
        nxt = cur.get(key)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[key] = nxt
        cur = nxt


def _listify(value: Any) -> Any:
    """Turn dicts keyed "0", "1", ... into lists (ordered by index)."""
    if isinstance(value, dict):
        converted = {k: _listify(v) for k, v in value.items()}
        if converted and all(k.isdigit() for k in converted):
            return [converted[k] for k in sorted(converted, key=int)]
        return converted
    if isinstance(value, list):
        return [_listify(v) for v in value]
    return value


def nest_fields(items: List[Tuple[str, Any]]) -> Dict[str, Any]:
    """Rebuild nested objects from bracket-notation form fields.

    `vi[title]=a`, `vi[tag][]=x`, `linkGroup[0][url]=u` become
    `{"vi": {"title": "a", "tag": ["x"]}, "linkGroup": [{"url": "u"}]}`.
    """
    root: Dict[str, Any] = {}
    for name, value in items:
        _assign(root, split_field_name(name), value)
    return _listify(root)


async def read_form(request: Request) -> Tuple[Dict[str, Any], Files]:
    """Read a multipart, urlencoded or JSON body into (fields, files).

    Files are grouped by their raw field name (e.g. "viPoster", "imageGroup[]").
    """
    ctype = (request.headers.get("content-type") or "").lower()
    if ctype.startswith("application/json"):
        raw = await request.body()
        if not raw:
            return {}, {}
        try:
            data = json.loads(raw)
        except ValueError:
            raise bad_request("Malformed JSON body")
        if not isinstance(data, dict):
            raise bad_request("JSON body must be an object")
        return data, {}

    if not (ctype.startswith("multipart/form-data") or ctype.startswith("application/x-www-form-urlencoded")):
        return {}, {}

    form = await request.form()
    fields: List[Tuple[str, Any]] = []
    files: Files = {}
    for name, value in form.multi_items():
        if isinstance(value, UploadFile):
            # Browsers send an empty part for an untouched <input type=file>.
            if not value.filename:
                continue
            files.setdefault(name, []).append(value)
        else:
            fields.append((name, value))
    return nest_fields(fields), files


def first_file(files: Files, name: str) -> UploadFile | None:
    got = files.get(name) or []
    return got[0] if got else None


@dataclass
class FormBody:
    fields: Dict[str, Any]
    files: Files


async def form_body(request: Request) -> FormBody:
    """FastAPI dependency wrapping `read_form` so route handlers can stay synchronous."""
    fields, files = await read_form(request)
    return FormBody(fields=fields, files=files)
