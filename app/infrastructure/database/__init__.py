"""
Database initialization and session management.
"""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.core.config import get_settings
from app.core.logging_config import get_logger
from app.infrastructure.database.models import (
    BranchInventory,
    Branch,
    ChartOfAccount,
    Expense,
    InventoryItem,
    JournalEntry,
    JournalEntryLine,
    Product,
    SalesLineItem,
    SalesTransaction,
)

logger = get_logger("infrastructure.database")


def build_engine(database_url: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False, connect_args={"check_same_thread": False})
    return create_engine(database_url, echo=False, pool_pre_ping=True)


DATABASE_URL = get_settings().database_url

engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(bind: Engine | None = None) -> None:
    """Initialize database - create all tables."""
    bind = bind or engine
    if bind.url.get_backend_name() == "sqlite" and bind.url.database not in (None, "", ":memory:"):
        Path(bind.url.database).parent.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(bind=bind)
    logger.info("Database initialized", extra={"backend": bind.url.get_backend_name()})


DEFAULT_CHART_OF_ACCOUNTS = [
    ("1000", "Assets", "ASSET", None),
    ("1010", "Cash on Hand", "ASSET", "1000"),
    ("1020", "Bank", "ASSET", "1000"),
    ("1100", "Accounts Receivable", "ASSET", "1000"),
    ("1200", "Inventory", "ASSET", "1000"),
    ("2000", "Liabilities", "LIABILITY", None),
    ("2010", "Accounts Payable", "LIABILITY", "2000"),
    ("2100", "Loans Payable", "LIABILITY", "2000"),
    ("3000", "Equity", "EQUITY", None),
    ("3010", "Owner's Capital", "EQUITY", "3000"),
    ("3100", "Retained Earnings", "EQUITY", "3000"),
    ("4000", "Revenue", "REVENUE", None),
    ("4010", "Sales Revenue", "REVENUE", "4000"),
    ("4020", "Service Revenue", "REVENUE", "4000"),
    ("5000", "Expenses", "EXPENSE", None),
    ("5010", "Cost of Goods Sold", "EXPENSE", "5000"),
    ("5020", "Rent Expense", "EXPENSE", "5000"),
    ("5030", "Salaries Expense", "EXPENSE", "5000"),
    ("5040", "Utilities Expense", "EXPENSE", "5000"),
]


def seed_default_accounts(session_factory: sessionmaker = SessionLocal) -> int:
    """Seed the default chart of accounts; existing codes are left alone.

    Returns the number of accounts created.
    """
    db = session_factory()
    created = 0
    try:
        ids_by_code = {a.code: a.id for a in db.query(ChartOfAccount).all()}
        for code, name, acc_type, parent_code in DEFAULT_CHART_OF_ACCOUNTS:
            if code in ids_by_code:
                continue
            account = ChartOfAccount(
                code=code,
                name=name,
                account_type=acc_type,
                parent_id=ids_by_code.get(parent_code) if parent_code else None,
            )
            db.add(account)
            db.flush()
            ids_by_code[code] = account.id
            created += 1
        db.commit()
    finally:
        db.close()
    logger.info("Default chart of accounts seeded", extra={"accounts_created": created})
    return created


if __name__ == "__main__":
    init_db()
    print("Database initialized successfully!")
