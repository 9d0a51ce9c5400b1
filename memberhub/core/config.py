"""
Configuration helpers for the memberhub core.

Settings are read once from environment variables and handed to the services
explicitly, so nothing below the app factory reaches into os.environ.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    public_key_path: str
    private_key_path: str
    require_email_verification: bool
    feed_size: int
    global_feed_size: int
    remember_token_days: int
    raster_per_page: int
    mostly_active_days: int
    remember_cookie_name: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=os.getenv("DATABASE_URL", ""),
        public_key_path=os.getenv("PUBLIC_KEY_PATH", "rsa_key.pub"),
        private_key_path=os.getenv("PRIVATE_KEY_PATH", "rsa_key"),
        require_email_verification=_bool(os.getenv("REQUIRE_EMAIL_VERIFICATION"), False),
        feed_size=_int(os.getenv("FEED_SIZE", "10"), 10),
        global_feed_size=_int(os.getenv("GLOBAL_FEED_SIZE", "10"), 10),
        remember_token_days=_int(os.getenv("REMEMBER_TOKEN_DAYS", "730"), 730),
        raster_per_page=_int(os.getenv("RASTER_PER_PAGE", "20"), 20),
        mostly_active_days=_int(os.getenv("MOSTLY_ACTIVE_DAYS", "30"), 30),
        remember_cookie_name=os.getenv("REMEMBER_COOKIE_NAME", "auth_token"),
    )
