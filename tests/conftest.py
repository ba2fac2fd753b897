from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import fakeredis
import mongomock
import pytest
from fastapi.testclient import TestClient

from vnjp_cms.api.server import app
from vnjp_cms.auth.crud import create_user
from vnjp_cms.auth.tokens import issue_token_pair
from vnjp_cms.config import Config
from vnjp_cms.db import init_db


class RecordingMailer:
    """Stands in for SmtpMailer; keeps every message instead of sending it."""

    def __init__(self) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.fail_with: Optional[Exception] = None

    def send(self, to: str, subject: str, html: str, attachments=()) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append({"to": to, "subject": subject, "html": html, "attachments": list(attachments)})


@pytest.fixture
def cfg(tmp_path: Path) -> Config:
    return Config(
        UPLOAD_DIR=str(tmp_path / "uploads"),
        REGISTER_CODE="letmein",
        ACCESS_TOKEN_SECRET="test_access_secret",
        REFRESH_TOKEN_SECRET="test_refresh_secret",
        JWT_ISS="vnjp_cms_test",
        AUTH_EMAIL_TO="inbox@example.com",
        CURRENT_URL="http://testserver/",
        NEWS_KEY="NEWS_KEY",
        AGRICULTURE_KEY="AGRICULTURE_KEY",
        AUTH_BOOTSTRAP_ADMIN_EMAIL="",
        AUTH_BOOTSTRAP_ADMIN_PASSWORD="",
    )


@pytest.fixture
def db():
    database = mongomock.MongoClient(tz_aware=True)["vnjp_cms_test"]
    init_db(database)
    return database


@pytest.fixture
def store():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def client(cfg, db, store, mailer):
    saved = {name: getattr(app.state, name, None) for name in ("cfg", "db", "redis", "mailer")}
    app.state.cfg = cfg
    app.state.db = db
    app.state.redis = store
    app.state.mailer = mailer
    try:
        yield TestClient(app)
    finally:
        for name, value in saved.items():
            setattr(app.state, name, value)


def make_user(db, email: str, *, password: str = "secret123", role: str = "user", verified: bool = True) -> Dict[str, Any]:
    return create_user(db, name=email.split("@")[0], email=email, password=password, role=role, verified=verified)


def bearer(db, store, cfg, user: Dict[str, Any]) -> Dict[str, str]:
    tokens = issue_token_pair(db, store, cfg, str(user["_id"]))
    return {"Authorization": f"Bearer {tokens['accessToken']}"}


@pytest.fixture
def admin_headers(db, store, cfg) -> Dict[str, str]:
    admin = make_user(db, "admin@example.com", role="admin")
    return bearer(db, store, cfg, admin)


def upload(name: str, content: bytes = b"\x89PNG fake", ctype: str = "image/png"):
    return (name, content, ctype)


def stored_files(cfg: Config) -> List[Path]:
    root = Path(cfg.UPLOAD_DIR)
    if not root.exists():
        return []
    return sorted(p for p in root.rglob("*") if p.is_file())
