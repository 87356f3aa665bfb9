"""
Pytest configuration and fixtures.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from app.domain.entities import Account, Branch, Product
from app.domain.reporting import ReportingEngine
from app.domain.services import AccountRegistry, BalanceCalculator, Ledger
from app.domain.value_objects import AccountType
from app.infrastructure.database import build_engine, init_db
from tests.fakes import (
    InMemoryAccountStore,
    InMemoryBranchLookup,
    InMemoryExpenseStore,
    InMemoryInventoryStore,
    InMemoryLedgerStore,
    InMemoryProductLookup,
    InMemorySalesStore,
)


@pytest.fixture
def account_store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def ledger_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def registry(account_store) -> AccountRegistry:
    return AccountRegistry(account_store)


@pytest.fixture
def ledger(registry, ledger_store) -> Ledger:
    return Ledger(registry, ledger_store)


@pytest.fixture
def balances(registry, ledger_store) -> BalanceCalculator:
    return BalanceCalculator(registry, ledger_store)


@pytest.fixture
def chart(registry) -> dict[str, Account]:
    """A small chart of accounts keyed by short name."""
    return {
        "cash": registry.create_account("1010", "Cash", AccountType.ASSET),
        "inventory": registry.create_account("1200", "Inventory", AccountType.ASSET),
        "payable": registry.create_account("2010", "Accounts Payable", AccountType.LIABILITY),
        "capital": registry.create_account("3010", "Owner's Capital", AccountType.EQUITY),
        "sales": registry.create_account("4010", "Sales Revenue", AccountType.REVENUE),
        "rent": registry.create_account("5020", "Rent Expense", AccountType.EXPENSE),
        "salaries": registry.create_account("5030", "Salaries Expense", AccountType.EXPENSE),
    }


@pytest.fixture
def branches() -> list[Branch]:
    return [Branch(name="Downtown"), Branch(name="Harbour")]


@pytest.fixture
def products() -> list[Product]:
    return [
        Product(name="Espresso Beans", cost_price=Decimal("12.50"), category="Coffee", price=Decimal("24")),
        Product(name="Oat Milk", cost_price=Decimal("1.80"), category="Dairy", price=Decimal("3.50")),
        Product(name="Paper Cups", cost_price=Decimal("4.00"), category="Supplies", price=Decimal("9")),
    ]


@pytest.fixture
def make_engine(registry, ledger, balances):
    """Build a ReportingEngine over in-memory fact stores."""

    def _make(
        sales=None,
        expenses=None,
        items=None,
        levels=None,
        products=None,
        branches=None,
        **overrides,
    ) -> ReportingEngine:
        stores = dict(
            sales_store=InMemorySalesStore(sales),
            expense_store=InMemoryExpenseStore(expenses),
            inventory_store=InMemoryInventoryStore(items, levels),
            product_lookup=InMemoryProductLookup(products),
            branch_lookup=InMemoryBranchLookup(branches),
        )
        stores.update(overrides)
        return ReportingEngine(
            registry=registry,
            ledger=ledger,
            balance_calculator=balances,
            max_workers=2,
            **stores,
        )

    return _make


@pytest.fixture
def sale_at():
    def _sale_at(day: date, hour: int = 12) -> datetime:
        return datetime(day.year, day.month, day.day, hour)

    return _sale_at


@pytest.fixture
def sql_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database per test."""
    engine = build_engine("sqlite://")
    init_db(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
    yield factory
    engine.dispose()
