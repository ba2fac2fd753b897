from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext


_pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
_JWT_ALG = "HS256"


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except Exception:
        return False


def new_one_time_string(user_id: str) -> str:
    """Random string mailed to the user; only its hash is stored."""
    return f"{uuid.uuid4()}{user_id}"


def encode_token(
    *,
    secret: str,
    claims: Dict[str, Any],
    issuer: str,
    audience: str,
    expires_in: timedelta,
    token_id: Optional[str] = None,
) -> str:
    if not secret:
        raise ValueError("jwt_secret_blank")

    now = datetime.now(timezone.utc)
    exp = now + max(expires_in, timedelta(seconds=1))

    payload: Dict[str, Any] = dict(claims)
    payload.update(
        {
            "iss": issuer,
            "aud": audience,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
    )
    if token_id:
        payload["jti"] = token_id
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def decode_token(*, token: str, secret: str, issuer: str) -> Dict[str, Any]:
    """Verify signature, expiry and issuer.

    The audience is the user id, which the caller doesn't know yet, so it is
    read back from the payload rather than checked here.
    """
    if not token:
        raise ValueError("token_blank")
    if not secret:
        raise ValueError("jwt_secret_blank")
    return jwt.decode(
        token,
        secret,
        algorithms=[_JWT_ALG],
        issuer=issuer,
        options={"verify_aud": False, "require": ["exp", "aud"]},
    )
