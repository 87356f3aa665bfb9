"""
FastAPI dependencies.
"""

from functools import lru_cache

from app.application.container import LedgerServices, build_services
from app.core.config import get_settings
from app.infrastructure.database import SessionLocal


@lru_cache
def get_services() -> LedgerServices:
    """Dependency - Ledger core wired to the configured database."""
    return build_services(SessionLocal, report_workers=get_settings().report_workers)
