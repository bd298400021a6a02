"""Application configuration from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "TrackRecord API"
    version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    api_v1_prefix: str = "/v1"

    # PostgreSQL connection parts; password comes from .env, never commit it
    database_host: str = "localhost"
    database_port: int = 5432
    database_user: str = "trackrecord"
    database_password: str = ""
    database_name: str = "trackrecord"
    database_ssl_mode: str = "disable"
    database_pool_size: int = 25
    database_max_overflow: int = 10

    # HS256 signing key for bearer tokens
    jwt_secret: str = ""
    jwt_expiry_hours: int = 24

    # Per-client-address limiter, process-local
    limiter_enabled: bool = True
    limiter_rps: float = 2.0
    limiter_burst: int = 1

    def _db_url(self, drivername: str, query: dict[str, str]) -> URL:
        return URL.create(
            drivername,
            username=self.database_user,
            password=self.database_password or None,
            host=self.database_host,
            port=self.database_port,
            database=self.database_name,
            query=query,
        )

    @property
    def database_url(self) -> str:
        """libpq-style URL for Alembic's offline mode and psql-style tooling."""
        url = self._db_url("postgresql", {"sslmode": self.database_ssl_mode})
        return url.render_as_string(hide_password=False)

    @property
    def async_database_url(self) -> URL:
        """asyncpg URL used by the application engine."""
        return self._db_url("postgresql+asyncpg", {"ssl": self.database_ssl_mode})


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
