"""Application configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed settings exposed via dependency injection throughout the app."""

    # Read .env with BOM tolerance; case-sensitive keys
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=True,
    )

    APP_NAME: str = "Salesboard API"
    ENV: str = "dev"  # dev | staging | prod
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    SLOW_REQUEST_MS: int = 1000

    # JWT
    SECRET_KEY: str  # set via env/.env
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_ISSUER: str = "salesboard-api"
    JWT_AUDIENCE: str = "salesboard-clients"

    # CORS
    CORS_ALLOWED_ORIGINS: list[str] = Field(default_factory=list)

    # DB
    DB_HOST: str = "127.0.0.1"
    DB_PORT: int = 3306
    DB_USER: str = "salesboard"
    DB_PASSWORD: str = ""  # set via env/.env
    DB_NAME: str = "salesboard"
    # Full SQLAlchemy URL; when set it wins over the DB_* parts above.
    DB_URL: str | None = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600

    SECURITY_MAX_CONCURRENCY: int = 4

    # Redis Cache Configuration (optional - KPIs fall back to in-process cache)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str | None = None
    REDIS_ENABLED: bool = True
    KPI_CACHE_TTL_SEC: int = 300

    MAX_UPLOAD_BYTES: int = 1 * 1024 * 1024  # 1 MB

    # Rate limits, see salesboard.core.rate_limit.limiter for syntax.
    LOGIN_RATE: str = "10/minute"
    CHAT_POST_RATE: str = "30/minute"

    # When true every manager-initiated status change becomes a pending
    # request that a MASTER must approve.
    MANAGER_CHANGES_REQUIRE_APPROVAL: bool = False

    DEFAULT_PAGE_SIZE: int = 25
    MAX_PAGE_SIZE: int = 200
    CHAT_MESSAGE_MAX_LENGTH: int = 4000

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return (
            f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"
        )


settings = Settings()
