"""
Domain Entities - Chart of accounts, journal entries and the transactional
facts (sales, expenses, stock levels) the reports are derived from.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from .value_objects import (
    BALANCE_TOLERANCE,
    ZERO,
    AccountCode,
    AccountType,
    EntryNumber,
    PaymentType,
)


@dataclass(frozen=True)
class Account:
    """
    Entity - Account in the chart of accounts.
    Accounts form a tree through ``parent_id``.
    """
    code: AccountCode
    name: str
    account_type: AccountType
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    parent_id: uuid.UUID | None = None

    @property
    def is_debit_normal(self) -> bool:
        return self.account_type.is_debit_normal


@dataclass(frozen=True)
class JournalEntryLine:
    """Entity - One debit or credit line of a journal entry."""
    journal_entry_id: uuid.UUID
    account_id: uuid.UUID
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(frozen=True)
class JournalEntry:
    """
    Entity - Posted journal entry.
    Double entry: total debits equal total credits. Never mutated once created;
    corrections are new offsetting entries.
    """
    entry_number: EntryNumber
    entry_date: date
    account_id: uuid.UUID
    total_debits: Decimal
    total_credits: Decimal
    lines: tuple[JournalEntryLine, ...] = ()
    description: str | None = None
    reference: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def difference(self) -> Decimal:
        return self.total_debits - self.total_credits

    def is_balanced(self) -> bool:
        return abs(self.difference) <= BALANCE_TOLERANCE

    def with_lines(self, lines: list[JournalEntryLine]) -> "JournalEntry":
        """Return a copy of the header carrying ``lines`` (totals untouched)."""
        return JournalEntry(
            entry_number=self.entry_number,
            entry_date=self.entry_date,
            account_id=self.account_id,
            total_debits=self.total_debits,
            total_credits=self.total_credits,
            lines=tuple(lines),
            description=self.description,
            reference=self.reference,
            id=self.id,
        )


@dataclass(frozen=True)
class Branch:
    """Entity - Branch, used only as a grouping key for reports."""
    name: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    address: str | None = None
    phone: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class Product:
    name: str
    cost_price: Decimal
    category: str
    price: Decimal = ZERO
    sku: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(frozen=True)
class SaleLineItem:
    """Product sold within a sale, priced at sale time."""
    product_id: uuid.UUID
    quantity: Decimal
    price: Decimal

    @property
    def revenue(self) -> Decimal:
        return self.quantity * self.price


@dataclass(frozen=True)
class SaleTransaction:
    total_amount: Decimal
    payment_type: PaymentType
    created_at: datetime
    line_items: tuple[SaleLineItem, ...] = ()
    branch_id: uuid.UUID | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(frozen=True)
class Expense:
    branch_id: uuid.UUID
    category: str
    amount: Decimal
    expense_date: date
    description: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(frozen=True)
class InventoryItem:
    """Company-wide stock level of a product."""
    product_id: uuid.UUID
    quantity: Decimal
    low_stock_at: Decimal
    location: str | None = None

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_at


@dataclass(frozen=True)
class BranchInventory:
    """Stock level of a product held at one branch."""
    branch_id: uuid.UUID
    product_id: uuid.UUID
    quantity: Decimal
