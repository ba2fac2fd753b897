"""Access / refresh token issuance and rotation.

- Access tokens carry `{userId, userRole}` and are short-lived.
- Refresh tokens carry no claims beyond iss/aud/exp/jti; the current one for
  each user is stored in Redis under the user id. Presenting anything other
  than the stored token fails, so each refresh invalidates the previous one.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict

import jwt
import redis
from pymongo.database import Database

from vnjp_cms.config import Config
from vnjp_cms.errors import unauthorized
from vnjp_cms.util.time import parse_duration

from .crud import get_user_by_id
from .security import decode_token, encode_token


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


def sign_access_token(db: Database, cfg: Config, user_id: str) -> str:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise unauthorized("User does not exist.")
    return encode_token(
        secret=cfg.ACCESS_TOKEN_SECRET,
        claims={"userId": str(user_id), "userRole": list(user.get("role") or [])},
        issuer=cfg.JWT_ISS,
        audience=str(user_id),
        expires_in=parse_duration(cfg.JWT_ACCESS_EXPIRESIN),
    )


def decode_access_token(cfg: Config, token: str) -> Dict[str, Any]:
    return decode_token(token=token, secret=cfg.ACCESS_TOKEN_SECRET, issuer=cfg.JWT_ISS)


def sign_refresh_token(store: redis.Redis, cfg: Config, user_id: str) -> str:
    """Issue a refresh token and make it the only valid one for this user.

    The store write always overwrites: with set-if-absent, a second login would
    hand out a token that the store never learned about.
    """
    token = encode_token(
        secret=cfg.REFRESH_TOKEN_SECRET,
        claims={},
        issuer=cfg.JWT_ISS,
        audience=str(user_id),
        expires_in=parse_duration(cfg.JWT_REFRESH_EXPIRESIN),
        token_id=uuid.uuid4().hex,
    )
    store.set(str(user_id), token, ex=int(cfg.REFRESH_TOKEN_TTL_SECONDS))
    return token


def verify_refresh_token(store: redis.Redis, cfg: Config, token: str) -> str:
    """Return the user id of a valid, current refresh token or raise 401."""
    try:
        payload = decode_token(token=token, secret=cfg.REFRESH_TOKEN_SECRET, issuer=cfg.JWT_ISS)
    except (jwt.InvalidTokenError, ValueError):
        raise unauthorized()

    user_id = payload.get("aud")
    if isinstance(user_id, list):
        user_id = user_id[0] if user_id else None
    if not user_id:
        raise unauthorized()

    stored = store.get(str(user_id))
    if isinstance(stored, bytes):
        stored = stored.decode("utf-8")
    if stored is None or stored != token:
        _debug(f"Refresh token rejected for user={user_id} (not current)")
        raise unauthorized()
    return str(user_id)


def revoke_refresh_token(store: redis.Redis, user_id: str) -> None:
    store.delete(str(user_id))


def issue_token_pair(db: Database, store: redis.Redis, cfg: Config, user_id: str) -> Dict[str, str]:
    return {
        "accessToken": sign_access_token(db, cfg, user_id),
        "refreshToken": sign_refresh_token(store, cfg, user_id),
    }
