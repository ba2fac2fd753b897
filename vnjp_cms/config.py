import os
from dataclasses import dataclass
from typing import Optional

# Optional: load a local .env file if present.
try:
    from dotenv import load_dotenv

    load_dotenv()
except Exception:
    # If python-dotenv isn't installed or .env isn't present, that's fine.
    pass


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    Variable names follow the existing deployment's .env so the same file can be reused.
    Nothing here is validated at startup; a missing secret fails on first use.
    """

    # -----------------
    # MongoDB
    # -----------------
    DB_URI: str = os.environ.get("DB_LOCAL_URI", "mongodb://localhost:27017")
    DB_NAME: str = os.environ.get("DB_NAME", "vnjp_cms")

    # -----------------
    # Redis (refresh tokens + detail cache)
    # -----------------
    REDIS_HOST: str = os.environ.get("REDIS_HOST_LOCAL", "localhost")
    REDIS_PORT: int = int(os.environ.get("REDIS_PORT_LOCAL", "6379"))
    REDIS_PASSWORD: str | None = os.environ.get("REDIS_PASSWORD") or None

    # Detail cache key prefixes: <prefix><documentId>
    NEWS_KEY: str = os.environ.get("NEWS_KEY", "NEWS_KEY")
    AGRICULTURE_KEY: str = os.environ.get("AGRICULTURE_KEY", "AGRICULTURE_KEY")

    # -----------------
    # Auth (JWT)
    # -----------------
    # NOTE: In dev, these default to fixed strings so you can get started.
    # In production, you MUST set both secrets to strong random values.
    ACCESS_TOKEN_SECRET: str = os.environ.get("ACCESS_TOKEN_SECRET", "dev_access_change_me")
    REFRESH_TOKEN_SECRET: str = os.environ.get("REFRESH_TOKEN_SECRET", "dev_refresh_change_me")
    # Durations accept "15m", "1h", "7d", "1y" or plain seconds.
    JWT_ACCESS_EXPIRESIN: str = os.environ.get("JWT_ACCESS_EXPIRESIN", "1h")
    JWT_REFRESH_EXPIRESIN: str = os.environ.get("JWT_REFRESH_EXPIRESIN", "1y")
    JWT_ISS: str = os.environ.get("JWT_ISS", "vnjp_cms")
    REFRESH_TOKEN_TTL_SECONDS: int = int(os.environ.get("REFRESH_TOKEN_TTL_SECONDS", str(365 * 24 * 60 * 60)))

    # Invite code required by /auth/register. Blank means registration is closed.
    REGISTER_CODE: str = os.environ.get("CODE", "")

    # Bootstrap first admin if the users collection is empty (disabled when blank)
    AUTH_BOOTSTRAP_ADMIN_EMAIL: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_EMAIL", "")
    AUTH_BOOTSTRAP_ADMIN_PASSWORD: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_PASSWORD", "")

    # One-time string lifetimes
    VERIFICATION_EXPIRE_SECONDS: int = int(os.environ.get("VERIFICATION_EXPIRE_SECONDS", "21600"))  # 6 hours
    LOGIN_LINK_EXPIRE_SECONDS: int = int(os.environ.get("LOGIN_LINK_EXPIRE_SECONDS", "3600"))
    PASSWORD_RESET_EXPIRE_SECONDS: int = int(os.environ.get("PASSWORD_RESET_EXPIRE_SECONDS", "3600"))

    # -----------------
    # Mail (Gmail SMTP by default)
    # -----------------
    AUTH_EMAIL: str | None = os.environ.get("AUTH_EMAIL")
    AUTH_PASSWORD: str | None = os.environ.get("AUTH_PASSWORD")
    AUTH_EMAIL_TO: str | None = os.environ.get("AUTH_EMAIL_TO")
    SMTP_HOST: str = os.environ.get("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT: int = int(os.environ.get("SMTP_PORT", "465"))
    MAIL_ENABLED: bool = _env_bool("MAIL_ENABLED", True) is True

    # Public base URL of this API (email verification links point here). Keep the trailing slash.
    CURRENT_URL: str = os.environ.get("CURRENT_URL", "http://localhost:5000/")

    # -----------------
    # Uploads
    # -----------------
    UPLOAD_DIR: str = os.environ.get("UPLOAD_DIR", "uploads")

    # -----------------
    # CORS
    # -----------------
    # The React dev server runs on :3000.
    CORS_ALLOW_ORIGINS: str = os.environ.get("CORS_ALLOW_ORIGINS", "http://localhost:3000")


def load_config() -> Config:
    return Config()
