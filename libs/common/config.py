from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production", "test"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Africa/Lagos"
    DEFAULT_CURRENCY: str = "NGN"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Auth
    # Placeholder default keeps local/test runs working; real deployments override via env.
    JWT_SECRET: str = "test-jwt-secret"
    JWT_ALGORITHM: str = "HS256"

    # Background worker
    REDIS_URL: str = "redis://localhost:6379/0"

    # Payment provider webhook shared secret (sent back as the verif-hash header)
    FLW_SECRET_HASH: str = "test-flw-secret-hash"

    # Sprint catalog
    SPRINT_CATALOG_SOURCE: Literal["live", "seed"] = "live"
    DISCOVERY_SEED_FALLBACK: bool = False

    # Orchestration
    ORCHESTRATION_STRICT_UNIQUENESS: bool = False

    # Platform-authored categories skip staged review when edited by an admin
    PLATFORM_CATEGORIES: List[str] = ["Core Platform Sprint", "Growth Fundamentals"]

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
