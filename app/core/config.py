"""
Application settings read from the environment.
"""

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    database_type: str = "sqlite"
    database_path: str = "./data/ledger.db"
    db_host: str = "localhost"
    db_port: str = "5432"
    db_name: str = "ledger"
    db_user: str = "postgres"
    db_password: str = "postgres"
    log_level: str = "INFO"
    log_format: str = "json"
    report_workers: int = 4

    @property
    def database_url(self) -> str:
        return get_engine_url(self)


def get_engine_url(settings: Settings) -> str:
    """Build the SQLAlchemy URL for the configured backend."""
    if settings.database_type == "sqlite":
        return f"sqlite:///{settings.database_path}"
    elif settings.database_type == "postgresql":
        return (
            f"postgresql://{settings.db_user}:{settings.db_password}"
            f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
        )
    else:
        raise ValueError(f"Unsupported database type: {settings.database_type}")


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_type=os.getenv("DATABASE_TYPE", "sqlite"),
        database_path=os.getenv("DATABASE_PATH", "./data/ledger.db"),
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=os.getenv("DB_PORT", "5432"),
        db_name=os.getenv("DB_NAME", "ledger"),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_format=os.getenv("LOG_FORMAT", "json"),
        report_workers=int(os.getenv("REPORT_WORKERS", "4")),
    )
