from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # ─────────── APP ───────────
    app_name: str = "BTO Housing Management"
    environment: str = "dev"
    log_level: str = "INFO"
    seed_demo_data: bool = False  # load bto.seed on startup (dev only)

    # ─────────── API ───────────
    api_prefix: str = "/api/v1"
    request_id_header: str = "X-Request-Id"

    # ─────────── DATABASE ───────────
    database_url: str = "sqlite:///./bto.db"
    auto_create_schema: bool = True  # dev/sqlite only; use alembic elsewhere
    sqlite_busy_timeout_seconds: int = 30

    # ─────────── JWT / AUTH ───────────
    # tokens are issued elsewhere with the same secret
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_access_token_minutes: int = 1440  # 24 hours


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
