"""Time-boxed, single-use strings for email verification, login links and password resets.

The plain string is mailed to the user; only a hash is stored, together with
`expiresAt`. A record is deleted once used or once found expired.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Type

from pymongo.database import Database

from vnjp_cms import schema
from vnjp_cms.config import Config
from vnjp_cms.errors import not_acceptable, not_found, unauthorized
from vnjp_cms.models import OneTimeString, PasswordReset, UserLogin, UserVerification
from vnjp_cms.util.time import as_utc, utcnow

from .crud import delete_user
from .security import hash_password, new_one_time_string, verify_password


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


def _issue(
    db: Database,
    *,
    collection: str,
    model: Type[OneTimeString],
    field: str,
    user_id: str,
    ttl_seconds: int,
    **extra: Any,
) -> str:
    plain = new_one_time_string(user_id)
    now = utcnow()
    rec = model(
        userId=str(user_id),
        createdAt=now,
        expiresAt=now + timedelta(seconds=int(ttl_seconds)),
        **{field: hash_password(plain)},
        **extra,
    )
    db[collection].delete_many({"userId": str(user_id)})
    db[collection].insert_one(rec.to_doc())
    return plain


def _consume(
    db: Database,
    *,
    collection: str,
    field: str,
    user_id: str,
    presented: str,
    missing: str,
    expired: str,
    mismatch: str,
) -> Dict[str, Any]:
    rec = db[collection].find_one({"userId": str(user_id)})
    if rec is None:
        raise not_found(missing)
    if as_utc(rec["expiresAt"]) < utcnow():
        db[collection].delete_many({"userId": str(user_id)})
        raise not_acceptable(expired)
    if not verify_password(presented or "", str(rec.get(field) or "")):
        raise unauthorized(mismatch)
    db[collection].delete_many({"userId": str(user_id)})
    return rec


# -----------------------------
# Email verification
# -----------------------------


def create_verification(db: Database, cfg: Config, user_id: str, url_redirect: str) -> str:
    return _issue(
        db,
        collection=schema.USER_VERIFICATIONS,
        model=UserVerification,
        field="uniqueString",
        user_id=user_id,
        ttl_seconds=cfg.VERIFICATION_EXPIRE_SECONDS,
        urlRedirect=url_redirect,
    )


def discard_registration(db: Database, user_id: str) -> None:
    """Undo a signup whose verification mail never went out."""
    db[schema.USER_VERIFICATIONS].delete_many({"userId": str(user_id)})
    delete_user(db, user_id)


def consume_verification(db: Database, user_id: str, unique_string: str) -> str:
    """Check the mailed string; returns the frontend URL to redirect to.

    An expired verification also removes the never-verified account so the
    email can register again.
    """
    rec = db[schema.USER_VERIFICATIONS].find_one({"userId": str(user_id)})
    if rec is not None and as_utc(rec["expiresAt"]) < utcnow():
        delete_user(db, user_id)
        _debug(f"Verification expired; removed unverified user={user_id}")
    rec = _consume(
        db,
        collection=schema.USER_VERIFICATIONS,
        field="uniqueString",
        user_id=user_id,
        presented=unique_string,
        missing="User not exist or verified already.",
        expired="User verifycation is expired.",
        mismatch="Username/password not exist",
    )
    return str(rec["urlRedirect"])


# -----------------------------
# Login link (issued right after verification)
# -----------------------------


def create_login_link(db: Database, cfg: Config, user_id: str) -> str:
    return _issue(
        db,
        collection=schema.USER_LOGINS,
        model=UserLogin,
        field="loginString",
        user_id=user_id,
        ttl_seconds=cfg.LOGIN_LINK_EXPIRE_SECONDS,
    )


def consume_login_link(db: Database, user_id: str, login_string: str) -> None:
    _consume(
        db,
        collection=schema.USER_LOGINS,
        field="loginString",
        user_id=user_id,
        presented=login_string,
        missing="User not exist or login already.",
        expired="User login is expired.",
        mismatch="Username/password not valid",
    )


# -----------------------------
# Password reset
# -----------------------------


def create_password_reset(db: Database, cfg: Config, user_id: str) -> str:
    return _issue(
        db,
        collection=schema.PASSWORD_RESETS,
        model=PasswordReset,
        field="resetString",
        user_id=user_id,
        ttl_seconds=cfg.PASSWORD_RESET_EXPIRE_SECONDS,
    )


def consume_password_reset(db: Database, user_id: str, reset_string: str) -> None:
    _consume(
        db,
        collection=schema.PASSWORD_RESETS,
        field="resetString",
        user_id=user_id,
        presented=reset_string,
        missing="Password reset request not found",
        expired="Reset password is expired.",
        mismatch="Username/password not exist",
    )
