from __future__ import annotations

import os
import random
import shutil
import time
from pathlib import Path
from typing import Iterable, Optional

from starlette.datastructures import UploadFile

from vnjp_cms.config import Config


def _debug(msg: str) -> None:
    print(f"[uploads] {msg}")


def upload_filename(original_name: str) -> str:
    """`admin-<epoch ms>-<random>-<original name>`; directory parts are dropped."""
    base = os.path.basename((original_name or "").replace("\\", "/")) or "file"
    suffix = f"{int(time.time() * 1000)}-{round(random.random() * 1e9)}"
    return f"admin-{suffix}-{base}"


def save_upload(cfg: Config, folder: str, upload: UploadFile) -> str:
    """Write an uploaded file under `<UPLOAD_DIR>/<folder>/` and return the stored path.

    The returned path is what gets persisted on the document (and later passed
    to `remove_file`).
    """
    target_dir = Path(cfg.UPLOAD_DIR) / folder
    target_dir.mkdir(parents=True, exist_ok=True)
    dest = target_dir / upload_filename(upload.filename or "")
    upload.file.seek(0)
    with open(dest, "wb") as fh:
        shutil.copyfileobj(upload.file, fh)
    stored = dest.as_posix()
    _debug(f"Saved {upload.filename!r} -> {stored}")
    return stored


def save_uploads(cfg: Config, folder: str, uploads: Iterable[UploadFile]) -> list[str]:
    return [save_upload(cfg, folder, u) for u in uploads]


def remove_file(path: Optional[str]) -> None:
    """Delete a stored upload. A file that is already gone is not an error."""
    if not path:
        return
    try:
        os.unlink(path)
        _debug(f"Removed {path}")
    except FileNotFoundError:
        _debug(f"Already missing: {path}")


def remove_files(paths: Iterable[Optional[str]]) -> None:
    for p in paths:
        remove_file(p)
