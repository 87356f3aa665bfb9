"""
Infrastructure - SQL implementations of the collaborator stores.

Every store opens its own short-lived session per call, so a store instance
can be shared between threads. SQLAlchemy failures surface as DataSourceError.
"""

from collections.abc import Generator
from contextlib import contextmanager
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from app.core.logging_config import get_logger
from app.domain import entities
from app.domain.exceptions import DataSourceError, ValidationError
from app.domain.stores import (
    IAccountStore,
    IBranchLookup,
    IExpenseStore,
    IInventoryStore,
    ILedgerStore,
    IProductLookup,
    ISalesStore,
)
from app.domain.value_objects import AccountCode, AccountType, DateRange, EntryNumber, PaymentType
from app.infrastructure.database.models import (
    Branch,
    BranchInventory,
    ChartOfAccount,
    Expense,
    InventoryItem,
    JournalEntry,
    JournalEntryLine,
    Product,
    SalesTransaction,
)

logger = get_logger("infrastructure.stores")


@contextmanager
def session_scope(session_factory: sessionmaker, source: str) -> Generator[Session, None, None]:
    """One session, one transaction; commit on success, roll back on any error."""
    db = session_factory()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Database operation failed", extra={"source": source, "error": str(exc)})
        raise DataSourceError(source) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def account_to_domain(row: ChartOfAccount) -> entities.Account:
    return entities.Account(
        id=row.id,
        code=AccountCode(row.code),
        name=row.name,
        account_type=AccountType(row.account_type),
        parent_id=row.parent_id,
    )


def entry_to_domain(row: JournalEntry) -> entities.JournalEntry:
    lines = sorted(row.lines, key=lambda line: line.line_number)
    return entities.JournalEntry(
        id=row.id,
        entry_number=EntryNumber(row.entry_number),
        entry_date=row.entry_date,
        account_id=row.account_id,
        total_debits=row.total_debits,
        total_credits=row.total_credits,
        description=row.description,
        reference=row.reference,
        lines=tuple(
            entities.JournalEntryLine(
                id=line.id,
                journal_entry_id=line.journal_entry_id,
                account_id=line.account_id,
                debit=line.debit,
                credit=line.credit,
                description=line.description,
            )
            for line in lines
        ),
    )


def sale_to_domain(row: SalesTransaction) -> entities.SaleTransaction:
    return entities.SaleTransaction(
        id=row.id,
        branch_id=row.branch_id,
        total_amount=row.total_amount,
        payment_type=PaymentType(row.payment_type),
        created_at=row.created_at,
        line_items=tuple(
            entities.SaleLineItem(product_id=item.product_id, quantity=item.quantity, price=item.price)
            for item in row.items
        ),
    )


class SqlAccountStore(IAccountStore):

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def insert(self, account: entities.Account) -> entities.Account:
        row = ChartOfAccount(
            id=account.id,
            code=account.code,
            name=account.name,
            account_type=account.account_type.value,
            parent_id=account.parent_id,
        )
        try:
            with session_scope(self.session_factory, "account_store") as db:
                db.add(row)
                db.flush()
                created = account_to_domain(row)
        except DataSourceError as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise ValidationError(
                    f"Account code already exists: {account.code}", field="code"
                ) from exc.__cause__
            raise
        return created

    def list_accounts(self, order_by: str = "code") -> list[entities.Account]:
        column = ChartOfAccount.name if order_by == "name" else ChartOfAccount.code
        with session_scope(self.session_factory, "account_store") as db:
            rows = db.query(ChartOfAccount).order_by(column).all()
            return [account_to_domain(row) for row in rows]

    def get_by_id(self, account_id: UUID) -> entities.Account | None:
        with session_scope(self.session_factory, "account_store") as db:
            row = db.get(ChartOfAccount, account_id)
            return account_to_domain(row) if row else None

    def get_by_code(self, code: AccountCode) -> entities.Account | None:
        with session_scope(self.session_factory, "account_store") as db:
            row = db.query(ChartOfAccount).filter(ChartOfAccount.code == code).first()
            return account_to_domain(row) if row else None


class SqlLedgerStore(ILedgerStore):

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def insert_entry_atomic(
        self, header: entities.JournalEntry, lines: list[entities.JournalEntryLine]
    ) -> entities.JournalEntry:
        with session_scope(self.session_factory, "ledger_store") as db:
            row = JournalEntry(
                id=header.id,
                entry_number=header.entry_number,
                entry_date=header.entry_date,
                description=header.description,
                reference=header.reference,
                account_id=header.account_id,
                total_debits=header.total_debits,
                total_credits=header.total_credits,
            )
            db.add(row)
            try:
                db.flush()
            except IntegrityError as exc:
                raise ValidationError(
                    f"Entry number already exists: {header.entry_number}", field="entry_number"
                ) from exc
            for idx, line in enumerate(lines, start=1):
                db.add(
                    JournalEntryLine(
                        id=line.id,
                        journal_entry_id=row.id,
                        account_id=line.account_id,
                        line_number=idx,
                        description=line.description,
                        debit=line.debit,
                        credit=line.credit,
                    )
                )
            db.flush()
            db.refresh(row)
            stored = entry_to_domain(row)
        logger.debug("Entry written", extra={"entry_id": stored.id, "lines": len(stored.lines)})
        return stored

    def get_by_id(self, entry_id: UUID) -> entities.JournalEntry | None:
        with session_scope(self.session_factory, "ledger_store") as db:
            row = (
                db.query(JournalEntry)
                .options(selectinload(JournalEntry.lines))
                .filter(JournalEntry.id == entry_id)
                .first()
            )
            return entry_to_domain(row) if row else None

    def list_by_date_range(self, date_range: DateRange | None = None) -> list[entities.JournalEntry]:
        with session_scope(self.session_factory, "ledger_store") as db:
            query = db.query(JournalEntry).options(selectinload(JournalEntry.lines))
            if date_range is not None:
                query = query.filter(
                    JournalEntry.entry_date >= date_range.start,
                    JournalEntry.entry_date <= date_range.end,
                )
            rows = query.order_by(JournalEntry.entry_date.desc()).all()
            return [entry_to_domain(row) for row in rows]


class SqlSalesStore(ISalesStore):

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def list_by_date_range(
        self, date_range: DateRange, branch_id: UUID | None = None
    ) -> list[entities.SaleTransaction]:
        start_at, end_at = date_range.start_at, date_range.end_at
        with session_scope(self.session_factory, "sales_store") as db:
            query = (
                db.query(SalesTransaction)
                .options(selectinload(SalesTransaction.items))
                .filter(SalesTransaction.created_at >= start_at, SalesTransaction.created_at <= end_at)
            )
            if branch_id is not None:
                query = query.filter(SalesTransaction.branch_id == branch_id)
            rows = query.order_by(SalesTransaction.created_at).all()
            return [sale_to_domain(row) for row in rows]


class SqlExpenseStore(IExpenseStore):

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def _to_domain(row: Expense) -> entities.Expense:
        return entities.Expense(
            id=row.id,
            branch_id=row.branch_id,
            category=row.category,
            amount=row.amount,
            expense_date=row.expense_date,
            description=row.description,
        )

    def list_by_branch(self, branch_id: UUID) -> list[entities.Expense]:
        with session_scope(self.session_factory, "expense_store") as db:
            rows = (
                db.query(Expense)
                .filter(Expense.branch_id == branch_id)
                .order_by(Expense.expense_date.desc())
                .all()
            )
            return [self._to_domain(row) for row in rows]

    def list_by_date_range(self, date_range: DateRange) -> list[entities.Expense]:
        with session_scope(self.session_factory, "expense_store") as db:
            rows = (
                db.query(Expense)
                .filter(Expense.expense_date >= date_range.start, Expense.expense_date <= date_range.end)
                .order_by(Expense.expense_date.desc())
                .all()
            )
            return [self._to_domain(row) for row in rows]


class SqlInventoryStore(IInventoryStore):

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def list_all(self) -> list[entities.InventoryItem]:
        with session_scope(self.session_factory, "inventory_store") as db:
            return [
                entities.InventoryItem(
                    product_id=row.product_id,
                    quantity=row.quantity,
                    low_stock_at=row.low_stock_at,
                    location=row.location,
                )
                for row in db.query(InventoryItem).all()
            ]

    def _branch_levels(self, *criteria) -> list[entities.BranchInventory]:
        with session_scope(self.session_factory, "inventory_store") as db:
            return [
                entities.BranchInventory(
                    branch_id=row.branch_id, product_id=row.product_id, quantity=row.quantity
                )
                for row in db.query(BranchInventory).filter(*criteria).all()
            ]

    def list_by_product(self, product_id: UUID) -> list[entities.BranchInventory]:
        return self._branch_levels(BranchInventory.product_id == product_id)

    def list_by_branch(self, branch_id: UUID) -> list[entities.BranchInventory]:
        return self._branch_levels(BranchInventory.branch_id == branch_id)


class SqlProductLookup(IProductLookup):

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_all(self) -> list[entities.Product]:
        with session_scope(self.session_factory, "product_lookup") as db:
            return [
                entities.Product(
                    id=row.id,
                    name=row.name,
                    sku=row.sku,
                    price=row.price,
                    cost_price=row.cost_price,
                    category=row.category,
                )
                for row in db.query(Product).order_by(Product.name).all()
            ]


class SqlBranchLookup(IBranchLookup):

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_all(self) -> list[entities.Branch]:
        with session_scope(self.session_factory, "branch_lookup") as db:
            return [
                entities.Branch(
                    id=row.id, name=row.name, address=row.address, phone=row.phone, email=row.email
                )
                for row in db.query(Branch).order_by(Branch.name).all()
            ]
