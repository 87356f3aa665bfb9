"""
Service wiring - assembles the ledger core on top of the SQL stores.
"""

from dataclasses import dataclass

from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.domain.reporting import ReportingEngine
from app.domain.services import AccountRegistry, BalanceCalculator, Ledger
from app.infrastructure.stores import (
    SqlAccountStore,
    SqlBranchLookup,
    SqlExpenseStore,
    SqlInventoryStore,
    SqlLedgerStore,
    SqlProductLookup,
    SqlSalesStore,
)


@dataclass(frozen=True)
class LedgerServices:
    registry: AccountRegistry
    ledger: Ledger
    balances: BalanceCalculator
    reports: ReportingEngine


def report_workers_for(session_factory: sessionmaker, requested: int) -> int:
    """A StaticPool engine holds one connection, which must not be shared between threads."""
    bind = session_factory.kw.get("bind")
    if bind is not None and isinstance(bind.pool, StaticPool):
        return 1
    return requested


def build_services(session_factory: sessionmaker, report_workers: int = 4) -> LedgerServices:
    registry = AccountRegistry(SqlAccountStore(session_factory))
    ledger_store = SqlLedgerStore(session_factory)
    ledger = Ledger(registry, ledger_store)
    balances = BalanceCalculator(registry, ledger_store)
    reports = ReportingEngine(
        registry=registry,
        ledger=ledger,
        balance_calculator=balances,
        sales_store=SqlSalesStore(session_factory),
        expense_store=SqlExpenseStore(session_factory),
        inventory_store=SqlInventoryStore(session_factory),
        product_lookup=SqlProductLookup(session_factory),
        branch_lookup=SqlBranchLookup(session_factory),
        max_workers=report_workers_for(session_factory, report_workers),
    )
    return LedgerServices(registry=registry, ledger=ledger, balances=balances, reports=reports)
