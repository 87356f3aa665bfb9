"""
Reporting Engine - business reports derived from the ledger and from the
transactional facts (sales, expenses, stock levels) held by collaborator stores.

Each report fetches its facts once, indexes them by id once, and folds over
them with pure accumulation. A collaborator failure aborts the whole report
with DataSourceError; partial reports are never returned.
"""

import uuid
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from decimal import Decimal

from app.core.logging_config import get_logger

from .entities import Account, Branch, Product, SaleTransaction
from .reports import (
    BranchFinancialReport,
    CashFlowReport,
    CategoryAmount,
    CategoryValue,
    InventoryReport,
    InventoryTurnoverReport,
    LowStockItem,
    ProductSales,
    ProfitAndLoss,
    SalesReport,
)
from .services import AccountRegistry, BalanceCalculator, Ledger, read_from
from .stores import (
    IBranchLookup,
    IExpenseStore,
    IInventoryStore,
    IProductLookup,
    ISalesStore,
)
from .value_objects import ZERO, AccountType, DateRange, PaymentType, as_utc, to_decimal

logger = get_logger("domain.reporting")

TOP_PRODUCTS_LIMIT = 10
DAYS_PER_YEAR = Decimal("365")
UNKNOWN_PRODUCT = "Unknown Product"


def index_by_id(items) -> dict:
    return {item.id: item for item in items}


class ReportingEngine:
    """
    Service - Sales, inventory, P&L, cash flow, branch and turnover reports.
    Holds no state between calls.
    """

    def __init__(
        self,
        registry: AccountRegistry,
        ledger: Ledger,
        balance_calculator: BalanceCalculator,
        sales_store: ISalesStore,
        expense_store: IExpenseStore,
        inventory_store: IInventoryStore,
        product_lookup: IProductLookup,
        branch_lookup: IBranchLookup,
        max_workers: int = 4,
    ):
        self.registry = registry
        self.ledger = ledger
        self.balance_calculator = balance_calculator
        self.sales_store = sales_store
        self.expense_store = expense_store
        self.inventory_store = inventory_store
        self.product_lookup = product_lookup
        self.branch_lookup = branch_lookup
        self.max_workers = max(1, max_workers)

    def _products(self) -> dict[uuid.UUID, Product]:
        return index_by_id(read_from("product_lookup", self.product_lookup.get_all))

    def _sales(self, window: DateRange, branch_id: uuid.UUID | None = None) -> list[SaleTransaction]:
        return read_from("sales_store", self.sales_store.list_by_date_range, window, branch_id)

    # -- Sales -----------------------------------------------------------

    def generate_sales_report(self, start: date, end: date) -> SalesReport:
        window = DateRange(start, end)
        sales = self._sales(window)
        products = self._products()

        total_sales = ZERO
        by_payment_type: dict[str, Decimal] = defaultdict(lambda: ZERO)
        by_date: dict[str, Decimal] = defaultdict(lambda: ZERO)
        quantities: dict[uuid.UUID, Decimal] = {}
        revenues: dict[uuid.UUID, Decimal] = {}

        for sale in sales:
            amount = to_decimal(sale.total_amount)
            total_sales += amount
            by_payment_type[PaymentType(sale.payment_type).value] += amount
            by_date[as_utc(sale.created_at).date().isoformat()] += amount

            for item in sale.line_items:
                quantities[item.product_id] = quantities.get(item.product_id, ZERO) + item.quantity
                revenues[item.product_id] = revenues.get(item.product_id, ZERO) + item.revenue

        ranked = sorted(
            (
                ProductSales(
                    product_id=product_id,
                    product_name=products[product_id].name if product_id in products else UNKNOWN_PRODUCT,
                    quantity=quantities[product_id],
                    revenue=revenues[product_id],
                )
                for product_id in quantities
            ),
            key=lambda p: p.revenue,
            reverse=True,
        )

        logger.info(
            "Sales report generated",
            extra={"start": start.isoformat(), "end": end.isoformat(), "sales": len(sales)},
        )
        return SalesReport(
            total_sales=total_sales,
            sales_by_payment_type=dict(by_payment_type),
            sales_by_date=dict(by_date),
            top_products=tuple(ranked[:TOP_PRODUCTS_LIMIT]),
        )

    # -- Inventory -------------------------------------------------------

    def generate_inventory_report(self) -> InventoryReport:
        items = read_from("inventory_store", self.inventory_store.list_all)
        products = self._products()

        total_value = ZERO
        low_stock: list[LowStockItem] = []
        by_category: dict[str, Decimal] = {}

        for item in items:
            product = products.get(item.product_id)
            if product is None:
                continue
            value = item.quantity * product.cost_price
            total_value += value
            by_category[product.category] = by_category.get(product.category, ZERO) + value
            if item.is_low_stock:
                low_stock.append(
                    LowStockItem(
                        product_id=item.product_id,
                        product_name=product.name,
                        current_quantity=item.quantity,
                        low_stock_at=item.low_stock_at,
                    )
                )

        return InventoryReport(
            total_value=total_value,
            low_stock_items=tuple(low_stock),
            by_category=tuple(
                CategoryValue(category=category, value=value)
                for category, value in by_category.items()
            ),
        )

    # -- Profit and loss -------------------------------------------------

    def generate_profit_and_loss(self, start: date, end: date) -> ProfitAndLoss:
        revenue = self.generate_sales_report(start, end).total_sales
        entries = self.ledger.list_entries(DateRange(start, end))
        accounts: dict[uuid.UUID, Account] = index_by_id(self.registry.list_accounts())

        expenses = ZERO
        by_account_name: dict[str, Decimal] = {}
        for entry in entries:
            for line in entry.lines:
                account = accounts.get(line.account_id)
                if account is None or account.account_type != AccountType.EXPENSE:
                    continue
                expenses += line.debit
                by_account_name[account.name] = by_account_name.get(account.name, ZERO) + line.debit

        return ProfitAndLoss(
            revenue=revenue,
            expenses=expenses,
            net_income=revenue - expenses,
            by_category=tuple(
                CategoryAmount(category=name, amount=amount)
                for name, amount in by_account_name.items()
            ),
        )

    # -- Cash flow -------------------------------------------------------

    def generate_cash_flow_report(
        self,
        start: date,
        end: date,
        beginning_balance: Decimal | None = None,
        cash_account_id: uuid.UUID | None = None,
    ) -> CashFlowReport:
        """
        Cash inflow is CASH sales; every expense in the window counts as outflow.
        The opening balance is ``beginning_balance`` when given, else the
        balance of ``cash_account_id`` at the end of the day before ``start``,
        else zero.
        """
        window = DateRange(start, end)
        opening = ZERO
        if beginning_balance is not None:
            opening = to_decimal(beginning_balance)
        elif cash_account_id is not None:
            self.registry.get_account(cash_account_id)
            # Nothing can be posted before date.min, so that window opens at zero.
            if start > date.min:
                opening = self.balance_calculator.account_balance(
                    cash_account_id, start - timedelta(days=1)
                )

        sales = self._sales(window)
        expenses = read_from("expense_store", self.expense_store.list_by_date_range, window)

        cash_inflow = sum(
            (to_decimal(s.total_amount) for s in sales if s.payment_type == PaymentType.CASH),
            ZERO,
        )
        cash_outflow = sum((to_decimal(e.amount) for e in expenses), ZERO)
        net_change = cash_inflow - cash_outflow

        return CashFlowReport(
            beginning_balance=opening,
            cash_inflow=cash_inflow,
            cash_outflow=cash_outflow,
            net_change=net_change,
            ending_balance=opening + net_change,
        )

    # -- Branches --------------------------------------------------------

    def generate_branch_financial_report(self, start: date, end: date) -> list[BranchFinancialReport]:
        window = DateRange(start, end)
        branches = read_from("branch_lookup", self.branch_lookup.get_all)
        products = self._products()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            reports = list(
                executor.map(lambda b: self._branch_financials(b, window, products), branches)
            )

        logger.info(
            "Branch financial report generated",
            extra={"start": start.isoformat(), "end": end.isoformat(), "branches": len(reports)},
        )
        return reports

    def _branch_financials(
        self, branch: Branch, window: DateRange, products: dict[uuid.UUID, Product]
    ) -> BranchFinancialReport:
        sales = self._sales(window, branch.id)
        total_sales = sum((to_decimal(s.total_amount) for s in sales), ZERO)

        expenses = read_from("expense_store", self.expense_store.list_by_branch, branch.id)
        branch_expenses = sum(
            (to_decimal(e.amount) for e in expenses if window.contains(e.expense_date)),
            ZERO,
        )

        stock = read_from("inventory_store", self.inventory_store.list_by_branch, branch.id)
        inventory_value = sum(
            (
                level.quantity * (products[level.product_id].cost_price if level.product_id in products else ZERO)
                for level in stock
            ),
            ZERO,
        )

        net_income = total_sales - branch_expenses
        profit_margin = net_income / total_sales * 100 if total_sales > 0 else ZERO

        return BranchFinancialReport(
            branch_id=branch.id,
            branch_name=branch.name,
            sales=total_sales,
            expenses=branch_expenses,
            net_income=net_income,
            inventory_value=inventory_value,
            profit_margin=profit_margin,
        )

    def generate_expenses_by_category(
        self, branch_id: uuid.UUID, start: date | None = None, end: date | None = None
    ) -> tuple[CategoryAmount, ...]:
        """
        Branch expense totals per category, in first-seen order.
        Without ``start``/``end`` every expense the branch has recorded is counted.
        """
        window = DateRange(start or date.min, end or date.max)
        expenses = read_from("expense_store", self.expense_store.list_by_branch, branch_id)

        by_category: dict[str, Decimal] = {}
        for expense in expenses:
            if not window.contains(expense.expense_date):
                continue
            by_category[expense.category] = by_category.get(expense.category, ZERO) + to_decimal(expense.amount)

        return tuple(
            CategoryAmount(category=category, amount=amount)
            for category, amount in by_category.items()
        )

    # -- Inventory turnover ----------------------------------------------

    def generate_inventory_turnover_report(self, start: date, end: date) -> list[InventoryTurnoverReport]:
        window = DateRange(start, end)
        products = read_from("product_lookup", self.product_lookup.get_all)
        sales = self._sales(window)

        sold: dict[uuid.UUID, Decimal] = {}
        for sale in sales:
            for item in sale.line_items:
                sold[item.product_id] = sold.get(item.product_id, ZERO) + item.quantity

        reports: list[InventoryTurnoverReport] = []
        for product in products:
            stock = read_from("inventory_store", self.inventory_store.list_by_product, product.id)
            total_quantity = sum((level.quantity for level in stock), ZERO)
            average_inventory = total_quantity / (len(stock) or 1)

            cost_of_goods_sold = sold.get(product.id, ZERO) * product.cost_price
            turnover_ratio = cost_of_goods_sold / average_inventory if average_inventory > 0 else ZERO
            days_to_sell = DAYS_PER_YEAR / turnover_ratio if turnover_ratio > 0 else ZERO

            reports.append(
                InventoryTurnoverReport(
                    product_id=product.id,
                    product_name=product.name,
                    category=product.category,
                    average_inventory=average_inventory,
                    cost_of_goods_sold=cost_of_goods_sold,
                    turnover_ratio=turnover_ratio,
                    days_to_sell=days_to_sell,
                )
            )
        return reports
