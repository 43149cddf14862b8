"""
Application configuration. Loads from environment variables.
Secrets and sensitive config must never be hardcoded.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache
from pathlib import Path

_DEFAULT_SEED_PATH = Path(__file__).resolve().parent / "seed" / "demo.yaml"


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "WorkSpace Hub"
    debug: bool = False

    # Database (sqlite file by default; postgresql:// is rewritten to psycopg3)
    database_url: str = "sqlite:///./workspace_hub.db"
    db_connect_timeout: int = 10  # seconds

    # Security
    secret_key: str = ""
    access_token_expire_hours: int = 24
    bcrypt_rounds: int = 12

    # Uploads
    max_upload_mb: int = 25

    # Demo roster, workspaces and activity log
    seed_path: str = str(_DEFAULT_SEED_PATH)

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = os.getenv("DEBUG", "false").lower() == "true"

        raw_url = os.getenv("DATABASE_URL", self.database_url)
        # Ensure psycopg3 driver if URL uses generic postgresql://
        if raw_url.startswith("postgresql://") and not raw_url.startswith("postgresql+psycopg"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))

        self.secret_key = os.getenv("SECRET_KEY", "")
        self.access_token_expire_hours = int(
            os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", str(self.access_token_expire_hours))
        )
        self.bcrypt_rounds = int(os.getenv("BCRYPT_ROUNDS", str(self.bcrypt_rounds)))

        self.max_upload_mb = int(os.getenv("MAX_UPLOAD_MB", str(self.max_upload_mb)))
        self.seed_path = os.getenv("SEED_PATH", self.seed_path)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024
