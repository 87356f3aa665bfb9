"""
Domain Layer - Value objects for the double-entry ledger.
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import NewType

from .exceptions import ValidationError

AccountCode = NewType("AccountCode", str)
EntryNumber = NewType("EntryNumber", str)

ZERO = Decimal("0")
BALANCE_TOLERANCE = Decimal("0.01")


class AccountType(str, Enum):
    """Account classification in the chart of accounts."""
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    @property
    def is_debit_normal(self) -> bool:
        """Asset and expense balances grow with debits, the rest with credits."""
        return self in (AccountType.ASSET, AccountType.EXPENSE)

    def signed_amount(self, debit: Decimal, credit: Decimal) -> Decimal:
        if self.is_debit_normal:
            return debit - credit
        return credit - debit


class PaymentType(str, Enum):
    """How a sale was settled at the point of sale."""
    CASH = "CASH"
    CARD = "CARD"
    MIXED = "MIXED"


@dataclass(frozen=True, slots=True)
class DateRange:
    """Value Object - Inclusive [start, end] reporting window."""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValidationError(
                f"Invalid date range: {self.start} is after {self.end}", field="start"
            )

    def contains(self, value: date | datetime) -> bool:
        if isinstance(value, datetime):
            value = as_utc(value).date()
        return self.start <= value <= self.end

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.start, time.min, tzinfo=timezone.utc)

    @property
    def end_at(self) -> datetime:
        return datetime.combine(self.end, time.max, tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class JournalLineDetail:
    """Requested journal line - what the caller asks the ledger to post."""
    account_id: uuid.UUID
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: str | None = None


def as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
