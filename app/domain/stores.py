"""
Collaborator contracts - the persistence the core reads from and writes to.
Implementations must raise DataSourceError (or let it be wrapped) on I/O failure.
"""

import uuid
from abc import ABC, abstractmethod

from .entities import (
    Account,
    Branch,
    BranchInventory,
    Expense,
    InventoryItem,
    JournalEntry,
    JournalEntryLine,
    Product,
    SaleTransaction,
)
from .value_objects import AccountCode, DateRange


class IAccountStore(ABC):

    @abstractmethod
    def insert(self, account: Account) -> Account:
        ...

    @abstractmethod
    def list_accounts(self, order_by: str = "code") -> list[Account]:
        ...

    @abstractmethod
    def get_by_id(self, account_id: uuid.UUID) -> Account | None:
        ...

    @abstractmethod
    def get_by_code(self, code: AccountCode) -> Account | None:
        ...


class ILedgerStore(ABC):

    @abstractmethod
    def insert_entry_atomic(
        self, header: JournalEntry, lines: list[JournalEntryLine]
    ) -> JournalEntry:
        """Write header and lines as one unit and return the stored entry."""
        ...

    @abstractmethod
    def get_by_id(self, entry_id: uuid.UUID) -> JournalEntry | None:
        ...

    @abstractmethod
    def list_by_date_range(self, date_range: DateRange | None = None) -> list[JournalEntry]:
        """Entries with embedded lines; ``None`` means every entry."""
        ...


class ISalesStore(ABC):

    @abstractmethod
    def list_by_date_range(
        self, date_range: DateRange, branch_id: uuid.UUID | None = None
    ) -> list[SaleTransaction]:
        ...


class IExpenseStore(ABC):

    @abstractmethod
    def list_by_branch(self, branch_id: uuid.UUID) -> list[Expense]:
        ...

    @abstractmethod
    def list_by_date_range(self, date_range: DateRange) -> list[Expense]:
        ...


class IInventoryStore(ABC):

    @abstractmethod
    def list_all(self) -> list[InventoryItem]:
        ...

    @abstractmethod
    def list_by_product(self, product_id: uuid.UUID) -> list[BranchInventory]:
        ...

    @abstractmethod
    def list_by_branch(self, branch_id: uuid.UUID) -> list[BranchInventory]:
        ...


class IProductLookup(ABC):

    @abstractmethod
    def get_all(self) -> list[Product]:
        ...


class IBranchLookup(ABC):

    @abstractmethod
    def get_all(self) -> list[Branch]:
        ...
