"""Infrastructure layer."""

from app.infrastructure.database import SessionLocal, build_engine, init_db
from app.infrastructure.database.models import (
    Branch,
    BranchInventory,
    ChartOfAccount,
    Expense,
    InventoryItem,
    JournalEntry,
    JournalEntryLine,
    Product,
    SalesLineItem,
    SalesTransaction,
)
