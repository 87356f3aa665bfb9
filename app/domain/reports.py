"""
Report value objects - immutable results of the balance calculator and
reporting engine. Never persisted; recomputed on demand.
"""

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from types import MappingProxyType

from .entities import Account
from .value_objects import BALANCE_TOLERANCE, ZERO


@dataclass(frozen=True)
class AccountBalance:
    account: Account
    balance: Decimal


@dataclass(frozen=True)
class TrialBalance:
    """Balance of every known account as of ``as_of``."""
    as_of: date
    balances: Mapping[uuid.UUID, AccountBalance] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "balances", MappingProxyType(dict(self.balances)))

    @property
    def debit_normal_total(self) -> Decimal:
        return sum(
            (b.balance for b in self.balances.values() if b.account.is_debit_normal),
            ZERO,
        )

    @property
    def credit_normal_total(self) -> Decimal:
        return sum(
            (b.balance for b in self.balances.values() if not b.account.is_debit_normal),
            ZERO,
        )

    def is_balanced(self) -> bool:
        """Accounting equation: assets + expenses == liabilities + equity + revenue."""
        return abs(self.debit_normal_total - self.credit_normal_total) <= BALANCE_TOLERANCE

    def __getitem__(self, account_id: uuid.UUID) -> AccountBalance:
        return self.balances[account_id]


@dataclass(frozen=True)
class ProductSales:
    product_id: uuid.UUID
    product_name: str
    quantity: Decimal
    revenue: Decimal


@dataclass(frozen=True)
class SalesReport:
    total_sales: Decimal
    sales_by_payment_type: Mapping[str, Decimal]
    sales_by_date: Mapping[str, Decimal]
    top_products: tuple[ProductSales, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "sales_by_payment_type", MappingProxyType(dict(self.sales_by_payment_type)))
        object.__setattr__(self, "sales_by_date", MappingProxyType(dict(self.sales_by_date)))


@dataclass(frozen=True)
class LowStockItem:
    product_id: uuid.UUID
    product_name: str
    current_quantity: Decimal
    low_stock_at: Decimal


@dataclass(frozen=True)
class CategoryValue:
    category: str
    value: Decimal


@dataclass(frozen=True)
class InventoryReport:
    total_value: Decimal
    low_stock_items: tuple[LowStockItem, ...]
    by_category: tuple[CategoryValue, ...]


@dataclass(frozen=True)
class CategoryAmount:
    category: str
    amount: Decimal


@dataclass(frozen=True)
class ProfitAndLoss:
    revenue: Decimal
    expenses: Decimal
    net_income: Decimal
    by_category: tuple[CategoryAmount, ...]


@dataclass(frozen=True)
class CashFlowReport:
    beginning_balance: Decimal
    cash_inflow: Decimal
    cash_outflow: Decimal
    net_change: Decimal
    ending_balance: Decimal


@dataclass(frozen=True)
class BranchFinancialReport:
    branch_id: uuid.UUID
    branch_name: str
    sales: Decimal
    expenses: Decimal
    net_income: Decimal
    inventory_value: Decimal
    profit_margin: Decimal


@dataclass(frozen=True)
class InventoryTurnoverReport:
    product_id: uuid.UUID
    product_name: str
    category: str
    average_inventory: Decimal
    cost_of_goods_sold: Decimal
    turnover_ratio: Decimal
    days_to_sell: Decimal
