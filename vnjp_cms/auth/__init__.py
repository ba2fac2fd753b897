"""Authentication / authorization.

- Users collection (email/password hash + role list + verified flag)
- Short-lived JWT access tokens sent as `Authorization: Bearer <token>`
- Long-lived refresh tokens, the current one per user kept in Redis
- Single-use hashed strings for email verification, login links and password resets
"""

from .deps import authorize_roles, require_admin, verify_access_token
from .crud import bootstrap_admin_if_needed, create_user

__all__ = [
    "authorize_roles",
    "require_admin",
    "verify_access_token",
    "bootstrap_admin_if_needed",
    "create_user",
]
