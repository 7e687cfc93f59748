from pydantic_settings import BaseSettings
from functools import lru_cache
from pydantic import Field


class Settings(BaseSettings):
    app_name: str = "Breaker Panel Catalog"
    debug: bool = False
    env: str = "development"
    log_level: str = "INFO"

    # Server
    backend_host: str = "0.0.0.0"
    backend_port: int = 8000
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Storage: "sqlite" for a single-household file, "postgres" for a server
    db_backend: str = Field(default="sqlite", pattern=r"^(sqlite|postgres)$")
    sqlite_path: str = "data/breakers.db"

    # PostgreSQL
    postgres_user: str = "breakers"
    postgres_password: str = "changeme"
    postgres_db: str = "breakers"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    database_url_override: str | None = Field(default=None, alias="DATABASE_URL")
    auto_migrate_on_startup: bool = False

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        if self.db_backend == "postgres":
            return (
                f"postgresql://{self.postgres_user}:{self.postgres_password}"
                f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
            )
        return f"sqlite:///{self.sqlite_path}"

    @property
    def async_database_url(self) -> str:
        return to_async_url(self.database_url)

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }


def to_async_url(url: str) -> str:
    """Swap a plain database URL for its async driver variant."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


@lru_cache()
def get_settings() -> Settings:
    return Settings()
