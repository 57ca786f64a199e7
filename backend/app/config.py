from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from app.errors import ConfigurationError

_REQUIRED_POSTGRES_VARS = ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    postgres_user: str | None = Field(default=None, validation_alias="POSTGRES_USER")
    postgres_password: str | None = Field(default=None, validation_alias="POSTGRES_PASSWORD")
    postgres_db: str | None = Field(default=None, validation_alias="POSTGRES_DB")
    postgres_host: str = Field(default="postgres-db", validation_alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, validation_alias="POSTGRES_PORT")
    database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

    db_synchronize: bool = Field(default=False, validation_alias="DB_SYNCHRONIZE")
    db_connect_retries: int = Field(default=9, ge=0, validation_alias="DB_CONNECT_RETRIES")
    db_connect_retry_delay_sec: float = Field(
        default=3.0, ge=0, validation_alias="DB_CONNECT_RETRY_DELAY_SEC"
    )

    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    cache_ttl_sec: int = Field(default=5, validation_alias="CACHE_TTL_SEC")
    cache_key_prefix: str = Field(default="", validation_alias="CACHE_KEY_PREFIX")

    app_env: str = Field(default="prod", validation_alias="APP_ENV")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    def missing_postgres_vars(self) -> list[str]:
        if self.database_url:
            return []
        values = {
            "POSTGRES_USER": self.postgres_user,
            "POSTGRES_PASSWORD": self.postgres_password,
            "POSTGRES_DB": self.postgres_db,
        }
        return [name for name in _REQUIRED_POSTGRES_VARS if not (values[name] or "").strip()]

    def sqlalchemy_url(self) -> URL:
        if self.database_url:
            try:
                return make_url(self.database_url)
            except ArgumentError as exc:
                raise ConfigurationError(["DATABASE_URL"], reason="invalid setting") from exc
        missing = self.missing_postgres_vars()
        if missing:
            raise ConfigurationError(missing)
        return URL.create(
            "postgresql",
            username=self.postgres_user,
            password=self.postgres_password,
            host=self.postgres_host,
            port=self.postgres_port,
            database=self.postgres_db,
        )

    def safe_database_url(self) -> str:
        """Connection URL for logs, password masked."""
        try:
            return self.sqlalchemy_url().render_as_string(hide_password=True)
        except ConfigurationError:
            return "<incomplete>"


@lru_cache
def get_settings() -> Settings:
    return Settings()
