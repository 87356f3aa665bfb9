"""Domain layer - Pure Python ledger and reporting logic."""

from app.domain.entities import (
    Account,
    Branch,
    BranchInventory,
    Expense,
    InventoryItem,
    JournalEntry,
    JournalEntryLine,
    Product,
    SaleLineItem,
    SaleTransaction,
)
from app.domain.exceptions import (
    DataSourceError,
    LedgerError,
    NotFoundError,
    UnbalancedEntryError,
    UnknownAccountError,
    ValidationError,
)
from app.domain.reporting import ReportingEngine
from app.domain.services import AccountRegistry, BalanceCalculator, Ledger
from app.domain.value_objects import (
    AccountCode,
    AccountType,
    DateRange,
    JournalLineDetail,
    PaymentType,
)
