from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vnjp_cms.errors import unauthorized

from .crud import get_user_by_id, has_role
from .tokens import decode_access_token


_bearer = HTTPBearer(auto_error=False)


def _state(request: Request, name: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(status_code=500, detail=f"server_{name}_missing")
    return value


def get_cfg(request: Request) -> Any:
    return _state(request, "cfg")


def get_db(request: Request) -> Any:
    return _state(request, "db")


def get_store(request: Request) -> Any:
    """Redis client (refresh tokens + detail caches)."""
    return _state(request, "redis")


def get_mailer(request: Request) -> Any:
    return _state(request, "mailer")


def verify_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Dict[str, Any]:
    """Require `Authorization: Bearer <access token>`; returns the decoded payload."""
    if credentials is None or not credentials.credentials:
        raise unauthorized()

    cfg = get_cfg(request)
    try:
        payload = decode_access_token(cfg, credentials.credentials)
    except jwt.ExpiredSignatureError as e:
        raise unauthorized(str(e))
    except (jwt.InvalidTokenError, ValueError):
        raise unauthorized()

    if not payload.get("userId"):
        raise unauthorized()
    request.state.payload = payload
    return payload


def authorize_roles(*roles: str) -> Callable[..., Dict[str, Any]]:
    """Dependency factory: the token's user (re-fetched) must hold one of `roles`."""
    allowed = list(roles)

    def _check(
        request: Request,
        payload: Dict[str, Any] = Depends(verify_access_token),
    ) -> Dict[str, Any]:
        user = get_user_by_id(get_db(request), payload.get("userId"))
        if user is None or not has_role(user, allowed):
            raise unauthorized("User is not allow to access this resource!")
        return user

    return _check


require_admin = authorize_roles("admin")
