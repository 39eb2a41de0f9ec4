"""
Application settings loaded from environment variables.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str                        # HMAC secret for auth tokens (required)
    jwt_expiry_seconds: int = 3600         # 1 hour
    bcrypt_rounds: int = 10

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./users.db"

    # ── Pagination ───────────────────────────────────────────────────────
    default_page_size: int = 10
    max_page_size: int = 100

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 3000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    @field_validator("jwt_secret")
    @classmethod
    def _secret_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("JWT_SECRET must not be empty")
        return value

    @field_validator("jwt_expiry_seconds", "default_page_size", "max_page_size")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @property
    def public_url(self) -> str:
        host = "localhost" if self.host in ("0.0.0.0", "") else self.host
        return f"http://{host}:{self.port}"


def get_settings() -> Settings:
    """Build settings from the environment (and ``.env`` if present)."""
    return Settings()
