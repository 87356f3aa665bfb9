"""
Infrastructure - SQLModel database models.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChartOfAccount(SQLModel, table=True):
    """Account in the chart of accounts."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    code: str = Field(unique=True, index=True)
    name: str
    account_type: str  # ASSET, LIABILITY, EQUITY, REVENUE, EXPENSE
    parent_id: UUID | None = Field(default=None, foreign_key="chartofaccount.id", index=True)
    created_at: datetime = Field(default_factory=_utcnow)


class JournalEntry(SQLModel, table=True):
    """Journal entry header."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    entry_number: str = Field(unique=True, index=True)
    entry_date: date = Field(index=True)
    description: str | None = None
    reference: str | None = None
    account_id: UUID = Field(foreign_key="chartofaccount.id")
    total_debits: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    total_credits: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    created_at: datetime = Field(default_factory=_utcnow)

    lines: list["JournalEntryLine"] = Relationship(back_populates="journal_entry")


class JournalEntryLine(SQLModel, table=True):
    """Journal entry line."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    journal_entry_id: UUID = Field(foreign_key="journalentry.id", index=True)
    account_id: UUID = Field(foreign_key="chartofaccount.id", index=True)
    line_number: int
    description: str | None = None
    debit: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    credit: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)

    journal_entry: "JournalEntry" = Relationship(back_populates="lines")


class Branch(SQLModel, table=True):
    """Branch / outlet."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(index=True)
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class Product(SQLModel, table=True):
    """Product sold and stocked."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    description: str | None = None
    sku: str | None = Field(default=None, index=True)
    price: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    cost_price: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    category: str = "Uncategorized"


class SalesTransaction(SQLModel, table=True):
    """Completed point-of-sale transaction."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    branch_id: UUID | None = Field(default=None, foreign_key="branch.id", index=True)
    total_amount: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    payment_type: str  # CASH, CARD, MIXED
    created_at: datetime = Field(default_factory=_utcnow, index=True)

    items: list["SalesLineItem"] = Relationship(back_populates="transaction")


class SalesLineItem(SQLModel, table=True):
    """Product line within a sale, priced at sale time."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    transaction_id: UUID = Field(foreign_key="salestransaction.id", index=True)
    product_id: UUID = Field(foreign_key="product.id")
    quantity: Decimal = Field(max_digits=18, decimal_places=4)
    price: Decimal = Field(max_digits=18, decimal_places=2)

    transaction: "SalesTransaction" = Relationship(back_populates="items")


class Expense(SQLModel, table=True):
    """Branch operating expense."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    branch_id: UUID = Field(foreign_key="branch.id", index=True)
    category: str
    amount: Decimal = Field(max_digits=18, decimal_places=2)
    description: str | None = None
    expense_date: date = Field(index=True)
    receipt_url: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class InventoryItem(SQLModel, table=True):
    """Company-wide stock level."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    product_id: UUID = Field(foreign_key="product.id", index=True)
    quantity: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=4)
    low_stock_at: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=4)
    location: str | None = None


class BranchInventory(SQLModel, table=True):
    """Stock level of a product at one branch."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    branch_id: UUID = Field(foreign_key="branch.id", index=True)
    product_id: UUID = Field(foreign_key="product.id", index=True)
    quantity: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=4)
