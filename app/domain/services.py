"""
Domain Services - Chart of accounts, journal posting and trial balance.
"""

import uuid
from collections.abc import Callable, Iterable
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import TypeVar

from app.core.logging_config import get_logger

from .entities import Account, JournalEntry, JournalEntryLine
from .exceptions import (
    DataSourceError,
    LedgerError,
    NotFoundError,
    UnbalancedEntryError,
    UnknownAccountError,
    ValidationError,
)
from .reports import AccountBalance, TrialBalance
from .stores import IAccountStore, ILedgerStore
from .value_objects import (
    BALANCE_TOLERANCE,
    ZERO,
    AccountCode,
    AccountType,
    DateRange,
    EntryNumber,
    JournalLineDetail,
    to_decimal,
)

logger = get_logger("domain.services")

T = TypeVar("T")

ACCOUNT_ORDERINGS = ("code", "name")


@contextmanager
def data_source(source: str):
    """Translate collaborator failures into DataSourceError.

    Domain errors raised by a store pass through unchanged.
    """
    try:
        yield
    except LedgerError:
        raise
    except Exception as exc:
        logger.error(
            "Data source failure",
            extra={"source": source, "error": str(exc)},
        )
        raise DataSourceError(source) from exc


def read_from(source: str, fetch: Callable[..., T], *args, **kwargs) -> T:
    with data_source(source):
        return fetch(*args, **kwargs)


def sum_lines(lines: Iterable[JournalLineDetail | JournalEntryLine]) -> tuple[Decimal, Decimal]:
    """Return (total debits, total credits) for a set of lines."""
    total_debits = ZERO
    total_credits = ZERO
    for line in lines:
        total_debits += to_decimal(line.debit)
        total_credits += to_decimal(line.credit)
    return total_debits, total_credits


class AccountRegistry:
    """
    Service - Owns the chart of accounts.
    """

    def __init__(self, account_store: IAccountStore):
        self.account_store = account_store

    def create_account(
        self,
        code: str,
        name: str,
        account_type: AccountType | str,
        parent_id: uuid.UUID | None = None,
    ) -> Account:
        code = (code or "").strip()
        name = (name or "").strip()
        if not code:
            raise ValidationError("Account code is required", field="code")
        if not name:
            raise ValidationError("Account name is required", field="name")
        try:
            account_type = AccountType(account_type)
        except ValueError:
            raise ValidationError(
                f"Unknown account type: {account_type}", field="account_type"
            ) from None

        existing = read_from("account_store", self.account_store.get_by_code, AccountCode(code))
        if existing is not None:
            raise ValidationError(f"Account code already exists: {code}", field="code")

        if parent_id is not None:
            self._check_parent_chain(parent_id)

        account = Account(
            code=AccountCode(code),
            name=name,
            account_type=account_type,
            parent_id=parent_id,
        )
        created = read_from("account_store", self.account_store.insert, account)
        logger.info(
            "Account created",
            extra={"account_id": created.id, "code": created.code, "type": created.account_type.value},
        )
        return created

    def _check_parent_chain(self, parent_id: uuid.UUID) -> None:
        seen: set[uuid.UUID] = set()
        current: uuid.UUID | None = parent_id
        while current is not None:
            if current in seen:
                raise ValidationError(
                    f"Account hierarchy contains a cycle at {current}", field="parent_id"
                )
            seen.add(current)
            parent = read_from("account_store", self.account_store.get_by_id, current)
            if parent is None:
                raise ValidationError(
                    f"Parent account does not exist: {current}", field="parent_id"
                )
            current = parent.parent_id

    def list_accounts(self, order_by: str = "code") -> list[Account]:
        if order_by not in ACCOUNT_ORDERINGS:
            raise ValidationError(f"Cannot order accounts by {order_by}", field="order_by")
        return read_from("account_store", self.account_store.list_accounts, order_by)

    def find_account(self, account_id: uuid.UUID) -> Account | None:
        return read_from("account_store", self.account_store.get_by_id, account_id)

    def get_account(self, account_id: uuid.UUID) -> Account:
        account = self.find_account(account_id)
        if account is None:
            raise NotFoundError("Account", str(account_id))
        return account

    def children_of(self, parent_id: uuid.UUID) -> list[Account]:
        return [a for a in self.list_accounts() if a.parent_id == parent_id]


class Ledger:
    """
    Service - Validates and posts journal entries.
    Debits must equal credits; nothing is written unless every check passes.
    """

    def __init__(self, registry: AccountRegistry, ledger_store: ILedgerStore):
        self.registry = registry
        self.ledger_store = ledger_store

    def post(
        self,
        entry_number: str,
        entry_date: date,
        account_id: uuid.UUID,
        lines: list[JournalLineDetail],
        description: str | None = None,
        reference: str | None = None,
    ) -> JournalEntry:
        self._validate_shape(entry_number, lines)
        self._validate_accounts(account_id, lines)

        total_debits, total_credits = sum_lines(lines)
        if abs(total_debits - total_credits) > BALANCE_TOLERANCE:
            logger.warning(
                "Rejected unbalanced entry",
                extra={
                    "entry_number": entry_number,
                    "debits": total_debits,
                    "credits": total_credits,
                },
            )
            raise UnbalancedEntryError(total_debits, total_credits)

        header = JournalEntry(
            entry_number=EntryNumber(entry_number.strip()),
            entry_date=entry_date,
            account_id=account_id,
            total_debits=total_debits,
            total_credits=total_credits,
            description=description,
            reference=reference,
        )
        entry_lines = [
            JournalEntryLine(
                journal_entry_id=header.id,
                account_id=line.account_id,
                debit=to_decimal(line.debit),
                credit=to_decimal(line.credit),
                description=line.description,
            )
            for line in lines
        ]

        entry = read_from(
            "ledger_store", self.ledger_store.insert_entry_atomic, header, entry_lines
        )
        logger.info(
            "Journal entry posted",
            extra={
                "entry_id": entry.id,
                "entry_number": entry.entry_number,
                "line_count": len(entry.lines),
                "total": entry.total_debits,
            },
        )
        return entry

    def _validate_shape(self, entry_number: str, lines: list[JournalLineDetail]) -> None:
        if not entry_number or not entry_number.strip():
            raise ValidationError("Entry number is required", field="entry_number")
        if not lines:
            raise ValidationError("A journal entry needs at least one line", field="lines")
        for idx, line in enumerate(lines, start=1):
            if to_decimal(line.debit) < 0 or to_decimal(line.credit) < 0:
                raise ValidationError(
                    f"Line {idx}: debit and credit must not be negative", field="lines"
                )

    def _validate_accounts(self, account_id: uuid.UUID, lines: list[JournalLineDetail]) -> None:
        referenced = [account_id] + [line.account_id for line in lines]
        checked: set[uuid.UUID] = set()
        for ref in referenced:
            if ref in checked:
                continue
            if self.registry.find_account(ref) is None:
                raise UnknownAccountError(str(ref))
            checked.add(ref)

    def get_entry(self, entry_id: uuid.UUID) -> JournalEntry:
        entry = read_from("ledger_store", self.ledger_store.get_by_id, entry_id)
        if entry is None:
            raise NotFoundError("JournalEntry", str(entry_id))
        return entry

    def list_entries(self, date_range: DateRange | None = None) -> list[JournalEntry]:
        entries = read_from("ledger_store", self.ledger_store.list_by_date_range, date_range)
        return sorted(entries, key=lambda e: e.entry_date, reverse=True)

    def reverse(
        self,
        entry_id: uuid.UUID,
        entry_number: str,
        entry_date: date,
        description: str | None = None,
    ) -> JournalEntry:
        """Post a new entry that offsets ``entry_id`` line for line."""
        original = self.get_entry(entry_id)
        lines = [
            JournalLineDetail(
                account_id=line.account_id,
                debit=line.credit,
                credit=line.debit,
                description=line.description,
            )
            for line in original.lines
        ]
        return self.post(
            entry_number=entry_number,
            entry_date=entry_date,
            account_id=original.account_id,
            lines=lines,
            description=description or f"Reversal of {original.entry_number}",
            reference=original.entry_number,
        )


class BalanceCalculator:
    """
    Service - Point-in-time account balances by replaying posted entries.
    """

    def __init__(self, registry: AccountRegistry, ledger_store: ILedgerStore):
        self.registry = registry
        self.ledger_store = ledger_store

    def trial_balance(self, as_of: date) -> TrialBalance:
        accounts = self.registry.list_accounts()
        entries = read_from(
            "ledger_store", self.ledger_store.list_by_date_range, DateRange(date.min, as_of)
        )

        by_id = {account.id: account for account in accounts}
        balances: dict[uuid.UUID, Decimal] = {account.id: ZERO for account in accounts}

        for entry in entries:
            if entry.entry_date > as_of:
                continue
            for line in entry.lines:
                account = by_id.get(line.account_id)
                if account is None:
                    continue
                balances[account.id] += account.account_type.signed_amount(
                    line.debit, line.credit
                )

        return TrialBalance(
            as_of=as_of,
            balances={
                account.id: AccountBalance(account=account, balance=balances[account.id])
                for account in accounts
            },
        )

    def account_balance(self, account_id: uuid.UUID, as_of: date) -> Decimal:
        self.registry.get_account(account_id)
        return self.trial_balance(as_of).balances[account_id].balance
