"""
Unit tests - Reporting engine over in-memory fact stores.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from app.domain.entities import (
    BranchInventory,
    Expense,
    InventoryItem,
    SaleLineItem,
    SaleTransaction,
)
from app.domain.exceptions import DataSourceError, NotFoundError, ValidationError
from app.domain.value_objects import JournalLineDetail, PaymentType
from tests.fakes import InMemoryExpenseStore, InMemorySalesStore

MARCH_1 = date(2025, 3, 1)
MARCH_31 = date(2025, 3, 31)


def sale(created_at, payment_type=PaymentType.CASH, items=(), total=None, branch_id=None):
    line_items = tuple(
        SaleLineItem(product_id=product_id, quantity=Decimal(qty), price=Decimal(price))
        for product_id, qty, price in items
    )
    if total is None:
        total = sum((item.revenue for item in line_items), Decimal("0"))
    return SaleTransaction(
        total_amount=Decimal(total),
        payment_type=payment_type,
        created_at=created_at,
        line_items=line_items,
        branch_id=branch_id,
    )


class TestSalesReport:
    """Test the sales report."""

    def test_totals_and_breakdowns(self, make_engine, products, sale_at):
        """Test totals, payment/date breakdowns and product ranking."""
        beans, milk, _ = products
        engine = make_engine(
            products=products,
            sales=[
                sale(sale_at(date(2025, 3, 2)), PaymentType.CASH, [(beans.id, "2", "24")]),
                sale(sale_at(date(2025, 3, 2)), PaymentType.CARD, [(milk.id, "4", "3.50")]),
                sale(sale_at(date(2025, 3, 3)), PaymentType.CARD, [(beans.id, "1", "24")]),
            ],
        )
        report = engine.generate_sales_report(MARCH_1, MARCH_31)

        assert report.total_sales == Decimal("86")
        assert report.sales_by_payment_type == {"CASH": Decimal("48"), "CARD": Decimal("38")}
        assert report.sales_by_date == {"2025-03-02": Decimal("62"), "2025-03-03": Decimal("24")}
        assert [p.product_name for p in report.top_products] == ["Espresso Beans", "Oat Milk"]
        assert report.top_products[0].quantity == Decimal("3")
        assert report.top_products[0].revenue == Decimal("72")

    def test_sales_outside_window_ignored(self, make_engine, sale_at):
        """Test window bounds cover whole days."""
        engine = make_engine(
            sales=[
                sale(sale_at(date(2025, 2, 28)), total="10"),
                sale(sale_at(MARCH_31, hour=23), total="5"),
                sale(sale_at(date(2025, 4, 1), hour=0), total="7"),
            ],
        )
        assert engine.generate_sales_report(MARCH_1, MARCH_31).total_sales == Decimal("5")

    def test_dates_grouped_in_utc(self, make_engine):
        """Test offset timestamps are grouped by their UTC date."""
        late_evening_west = datetime(2025, 3, 2, 21, 0, tzinfo=timezone(timedelta(hours=-5)))
        engine = make_engine(sales=[sale(late_evening_west, total="12")])
        report = engine.generate_sales_report(MARCH_1, MARCH_31)
        assert report.sales_by_date == {"2025-03-03": Decimal("12")}

    def test_top_products_truncated_to_ten(self, make_engine, sale_at):
        """Test only the ten best-selling products are kept."""
        product_ids = [uuid4() for _ in range(12)]
        engine = make_engine(
            sales=[
                sale(sale_at(MARCH_1), items=[(pid, "1", str(idx + 1)) for idx, pid in enumerate(product_ids)])
            ],
        )
        top = engine.generate_sales_report(MARCH_1, MARCH_31).top_products
        assert len(top) == 10
        assert [p.revenue for p in top] == [Decimal(n) for n in range(12, 2, -1)]

    def test_ties_keep_first_seen_order(self, make_engine, sale_at):
        """Test equal revenue keeps first-seen product order."""
        first, second, third = uuid4(), uuid4(), uuid4()
        engine = make_engine(
            sales=[
                sale(sale_at(MARCH_1), items=[(first, "1", "10"), (second, "2", "5")]),
                sale(sale_at(date(2025, 3, 2)), items=[(third, "1", "10")]),
            ],
        )
        top = engine.generate_sales_report(MARCH_1, MARCH_31).top_products
        assert [p.product_id for p in top] == [first, second, third]

    def test_unresolved_product_named_unknown(self, make_engine, sale_at):
        """Test a product missing from the lookup is reported as unknown."""
        engine = make_engine(sales=[sale(sale_at(MARCH_1), items=[(uuid4(), "1", "3")])])
        top = engine.generate_sales_report(MARCH_1, MARCH_31).top_products
        assert top[0].product_name == "Unknown Product"

    def test_empty_window(self, make_engine):
        """Test a window with no sales."""
        report = make_engine().generate_sales_report(MARCH_1, MARCH_31)
        assert report.total_sales == Decimal("0")
        assert report.sales_by_payment_type == {}
        assert report.top_products == ()

    def test_inverted_window_rejected(self, make_engine):
        """Test start after end is rejected."""
        with pytest.raises(ValidationError):
            make_engine().generate_sales_report(MARCH_31, MARCH_1)

    def test_breakdowns_cannot_be_modified(self, make_engine, sale_at):
        """Test both breakdown mappings are read-only."""
        engine = make_engine(sales=[sale(sale_at(MARCH_1), total="10")])
        report = engine.generate_sales_report(MARCH_1, MARCH_31)
        with pytest.raises(TypeError):
            report.sales_by_date["2025-03-01"] = Decimal("0")
        with pytest.raises(TypeError):
            report.sales_by_payment_type["CARD"] = Decimal("1")
        assert report.sales_by_date == {"2025-03-01": Decimal("10")}


class TestInventoryReport:
    """Test the inventory report."""

    def test_low_stock_and_category_values(self, make_engine, products):
        """Test low-stock detection at the threshold and per-category value."""
        beans, milk, cups = products
        engine = make_engine(
            products=products,
            items=[
                InventoryItem(product_id=beans.id, quantity=Decimal("5"), low_stock_at=Decimal("10")),
                InventoryItem(product_id=milk.id, quantity=Decimal("20"), low_stock_at=Decimal("20")),
                InventoryItem(product_id=cups.id, quantity=Decimal("100"), low_stock_at=Decimal("50")),
            ],
        )
        report = engine.generate_inventory_report()

        assert [i.product_name for i in report.low_stock_items] == ["Espresso Beans", "Oat Milk"]
        assert report.low_stock_items[0].current_quantity == Decimal("5")
        assert report.total_value == Decimal("62.50") + Decimal("36.00") + Decimal("400.00")
        assert {c.category: c.value for c in report.by_category} == {
            "Coffee": Decimal("62.50"),
            "Dairy": Decimal("36.00"),
            "Supplies": Decimal("400.00"),
        }

    def test_items_for_unknown_products_skipped(self, make_engine, products):
        """Test items without a product contribute nothing."""
        engine = make_engine(
            products=products,
            items=[InventoryItem(product_id=uuid4(), quantity=Decimal("1"), low_stock_at=Decimal("5"))],
        )
        report = engine.generate_inventory_report()
        assert report.total_value == Decimal("0")
        assert report.low_stock_items == ()


class TestProfitAndLoss:
    """Test the profit and loss report."""

    def test_revenue_from_sales_and_expenses_from_ledger(self, make_engine, ledger, chart, sale_at):
        """Test revenue comes from sales and expenses from ledger debits."""
        ledger.post("JE-1", date(2025, 3, 5), chart["rent"].id, [
            JournalLineDetail(account_id=chart["rent"].id, debit=Decimal("800")),
            JournalLineDetail(account_id=chart["cash"].id, credit=Decimal("800")),
        ])
        ledger.post("JE-2", date(2025, 3, 25), chart["salaries"].id, [
            JournalLineDetail(account_id=chart["salaries"].id, debit=Decimal("1500")),
            JournalLineDetail(account_id=chart["cash"].id, credit=Decimal("1500")),
        ])
        ledger.post("JE-3", date(2025, 4, 2), chart["rent"].id, [
            JournalLineDetail(account_id=chart["rent"].id, debit=Decimal("800")),
            JournalLineDetail(account_id=chart["cash"].id, credit=Decimal("800")),
        ])
        engine = make_engine(sales=[sale(sale_at(date(2025, 3, 10)), total="4000")])

        pnl = engine.generate_profit_and_loss(MARCH_1, MARCH_31)

        assert pnl.revenue == Decimal("4000")
        assert pnl.expenses == Decimal("2300")
        assert pnl.net_income == Decimal("1700")
        assert {c.category: c.amount for c in pnl.by_category} == {
            "Rent Expense": Decimal("800"),
            "Salaries Expense": Decimal("1500"),
        }


class TestCashFlowReport:
    """Test the cash flow report."""

    def test_ending_balance(self, make_engine, branches, sale_at):
        """Test cash sales in, every expense in the window out."""
        downtown = branches[0]
        engine = make_engine(
            sales=[
                sale(sale_at(date(2025, 3, 3)), PaymentType.CASH, total="300"),
                sale(sale_at(date(2025, 3, 4)), PaymentType.CASH, total="200"),
                sale(sale_at(date(2025, 3, 4)), PaymentType.CARD, total="999"),
            ],
            expenses=[
                Expense(branch_id=downtown.id, category="Rent", amount=Decimal("150"), expense_date=date(2025, 3, 6)),
                Expense(branch_id=downtown.id, category="Utilities", amount=Decimal("50"), expense_date=date(2025, 3, 7)),
                Expense(branch_id=downtown.id, category="Rent", amount=Decimal("150"), expense_date=date(2025, 4, 6)),
            ],
        )
        report = engine.generate_cash_flow_report(MARCH_1, MARCH_31, beginning_balance=Decimal("0"))

        assert report.cash_inflow == Decimal("500")
        assert report.cash_outflow == Decimal("200")
        assert report.net_change == Decimal("300")
        assert report.ending_balance == Decimal("300")

    def test_explicit_beginning_balance(self, make_engine, sale_at):
        """Test a caller-supplied opening balance."""
        engine = make_engine(sales=[sale(sale_at(date(2025, 3, 3)), total="100")])
        report = engine.generate_cash_flow_report(MARCH_1, MARCH_31, beginning_balance=Decimal("1000"))
        assert report.beginning_balance == Decimal("1000")
        assert report.ending_balance == Decimal("1100")

    def test_beginning_balance_from_cash_account(self, make_engine, ledger, chart):
        """Test the opening balance is the cash account at the day before start."""
        ledger.post("JE-1", date(2025, 2, 28), chart["cash"].id, [
            JournalLineDetail(account_id=chart["cash"].id, debit=Decimal("2500")),
            JournalLineDetail(account_id=chart["capital"].id, credit=Decimal("2500")),
        ])
        ledger.post("JE-2", MARCH_1, chart["cash"].id, [
            JournalLineDetail(account_id=chart["cash"].id, debit=Decimal("400")),
            JournalLineDetail(account_id=chart["capital"].id, credit=Decimal("400")),
        ])
        report = make_engine().generate_cash_flow_report(
            MARCH_1, MARCH_31, cash_account_id=chart["cash"].id
        )
        assert report.beginning_balance == Decimal("2500")
        assert report.ending_balance == Decimal("2500")

    def test_cash_account_window_from_earliest_date(self, make_engine, ledger, chart):
        """Test a window opening on the earliest date opens at zero."""
        ledger.post("JE-1", date(2025, 2, 28), chart["cash"].id, [
            JournalLineDetail(account_id=chart["cash"].id, debit=Decimal("2500")),
            JournalLineDetail(account_id=chart["capital"].id, credit=Decimal("2500")),
        ])
        report = make_engine().generate_cash_flow_report(
            date.min, MARCH_31, cash_account_id=chart["cash"].id
        )
        assert report.beginning_balance == Decimal("0")
        assert report.ending_balance == Decimal("0")

    def test_unknown_cash_account(self, make_engine):
        """Test an unknown cash account is a lookup miss."""
        with pytest.raises(NotFoundError):
            make_engine().generate_cash_flow_report(MARCH_1, MARCH_31, cash_account_id=uuid4())

    def test_unknown_cash_account_from_earliest_date(self, make_engine):
        """Test the cash account is resolved even when no balance is read."""
        with pytest.raises(NotFoundError):
            make_engine().generate_cash_flow_report(date.min, MARCH_31, cash_account_id=uuid4())

    def test_defaults_to_zero_opening(self, make_engine):
        """Test no opening source means zero."""
        report = make_engine().generate_cash_flow_report(MARCH_1, MARCH_31)
        assert report.beginning_balance == Decimal("0")
        assert report.ending_balance == Decimal("0")


class TestBranchFinancialReport:
    """Test the per-branch financial report."""

    def test_per_branch_figures(self, make_engine, branches, products, sale_at):
        """Test sales, expenses, margin and stock value per branch."""
        downtown, harbour = branches
        beans, milk, _ = products
        engine = make_engine(
            branches=branches,
            products=products,
            sales=[
                sale(sale_at(date(2025, 3, 2)), total="1000", branch_id=downtown.id),
                sale(sale_at(date(2025, 3, 9)), total="500", branch_id=downtown.id),
                sale(sale_at(date(2025, 3, 9)), total="70", branch_id=harbour.id),
            ],
            expenses=[
                Expense(branch_id=downtown.id, category="Rent", amount=Decimal("600"), expense_date=date(2025, 3, 1)),
                Expense(branch_id=downtown.id, category="Rent", amount=Decimal("600"), expense_date=date(2025, 2, 1)),
            ],
            levels=[
                BranchInventory(branch_id=downtown.id, product_id=beans.id, quantity=Decimal("4")),
                BranchInventory(branch_id=downtown.id, product_id=milk.id, quantity=Decimal("10")),
                BranchInventory(branch_id=harbour.id, product_id=beans.id, quantity=Decimal("2")),
            ],
        )
        reports = {r.branch_name: r for r in engine.generate_branch_financial_report(MARCH_1, MARCH_31)}

        assert reports["Downtown"].sales == Decimal("1500")
        assert reports["Downtown"].expenses == Decimal("600")
        assert reports["Downtown"].net_income == Decimal("900")
        assert reports["Downtown"].profit_margin == Decimal("60")
        assert reports["Downtown"].inventory_value == Decimal("68.00")
        assert reports["Harbour"].expenses == Decimal("0")
        assert reports["Harbour"].inventory_value == Decimal("25.00")

    def test_branch_without_sales_has_zero_margin(self, make_engine, branches):
        """Test margin is zero when a branch has no sales."""
        downtown = branches[0]
        engine = make_engine(
            branches=[downtown],
            expenses=[Expense(branch_id=downtown.id, category="Rent", amount=Decimal("600"),
                              expense_date=date(2025, 3, 1))],
        )
        (report,) = engine.generate_branch_financial_report(MARCH_1, MARCH_31)
        assert report.sales == Decimal("0")
        assert report.net_income == Decimal("-600")
        assert report.profit_margin == Decimal("0")

    def test_report_order_follows_branch_lookup(self, make_engine, branches):
        """Test results come back in branch lookup order."""
        reports = make_engine(branches=branches).generate_branch_financial_report(MARCH_1, MARCH_31)
        assert [r.branch_id for r in reports] == [b.id for b in branches]

    def test_failing_store_aborts_whole_report(self, make_engine, branches):
        """Test one failing branch aborts the report."""
        class FlakyExpenseStore(InMemoryExpenseStore):
            def list_by_branch(self, branch_id):
                if branch_id == branches[1].id:
                    raise ConnectionError("expense service down")
                return super().list_by_branch(branch_id)

        engine = make_engine(branches=branches, expense_store=FlakyExpenseStore())
        with pytest.raises(DataSourceError) as excinfo:
            engine.generate_branch_financial_report(MARCH_1, MARCH_31)
        assert excinfo.value.source == "expense_store"
        assert isinstance(excinfo.value.__cause__, ConnectionError)


class TestExpensesByCategory:
    """Test branch expense totals per category."""

    @pytest.fixture
    def expenses(self, branches):
        downtown, harbour = branches
        return [
            Expense(branch_id=downtown.id, category="Utilities", amount=Decimal("80"), expense_date=date(2025, 3, 3)),
            Expense(branch_id=downtown.id, category="Rent", amount=Decimal("600"), expense_date=date(2025, 3, 1)),
            Expense(branch_id=downtown.id, category="Utilities", amount=Decimal("45.50"), expense_date=date(2025, 3, 20)),
            Expense(branch_id=downtown.id, category="Rent", amount=Decimal("600"), expense_date=date(2025, 4, 1)),
            Expense(branch_id=harbour.id, category="Rent", amount=Decimal("400"), expense_date=date(2025, 3, 1)),
        ]

    def test_totals_per_category_in_first_seen_order(self, make_engine, branches, expenses):
        """Test sums per category keep first-seen order."""
        engine = make_engine(expenses=expenses)
        totals = engine.generate_expenses_by_category(branches[0].id, MARCH_1, MARCH_31)
        assert [(c.category, c.amount) for c in totals] == [
            ("Utilities", Decimal("125.50")),
            ("Rent", Decimal("600")),
        ]

    def test_without_window_counts_every_expense(self, make_engine, branches, expenses):
        """Test no window means every recorded expense of the branch."""
        totals = make_engine(expenses=expenses).generate_expenses_by_category(branches[0].id)
        assert {c.category: c.amount for c in totals} == {
            "Utilities": Decimal("125.50"),
            "Rent": Decimal("1200"),
        }

    def test_other_branches_excluded(self, make_engine, branches, expenses):
        """Test only the requested branch is counted."""
        totals = make_engine(expenses=expenses).generate_expenses_by_category(branches[1].id)
        assert [(c.category, c.amount) for c in totals] == [("Rent", Decimal("400"))]

    def test_branch_without_expenses(self, make_engine):
        """Test an unknown or empty branch yields no categories."""
        assert make_engine().generate_expenses_by_category(uuid4()) == ()

    def test_inverted_window_rejected(self, make_engine, branches):
        """Test start after end is rejected."""
        with pytest.raises(ValidationError):
            make_engine().generate_expenses_by_category(branches[0].id, MARCH_31, MARCH_1)

    def test_store_failure(self, make_engine, branches):
        """Test an expense store failure surfaces as DataSourceError."""
        class BrokenExpenseStore(InMemoryExpenseStore):
            def list_by_branch(self, branch_id):
                raise ConnectionError("expense service down")

        engine = make_engine(expense_store=BrokenExpenseStore())
        with pytest.raises(DataSourceError):
            engine.generate_expenses_by_category(branches[0].id)


class TestInventoryTurnoverReport:
    """Test the inventory turnover report."""

    def test_turnover_and_days_to_sell(self, make_engine, branches, products, sale_at):
        """Test average inventory, COGS, turnover and days to sell."""
        downtown, harbour = branches
        beans = products[0]
        engine = make_engine(
            products=[beans],
            sales=[
                sale(sale_at(date(2025, 3, 2)), items=[(beans.id, "6", "24")]),
                sale(sale_at(date(2025, 3, 20)), items=[(beans.id, "4", "24")]),
                sale(sale_at(date(2025, 4, 2)), items=[(beans.id, "50", "24")]),
            ],
            levels=[
                BranchInventory(branch_id=downtown.id, product_id=beans.id, quantity=Decimal("30")),
                BranchInventory(branch_id=harbour.id, product_id=beans.id, quantity=Decimal("20")),
            ],
        )
        (report,) = engine.generate_inventory_turnover_report(MARCH_1, MARCH_31)

        assert report.average_inventory == Decimal("25")
        assert report.cost_of_goods_sold == Decimal("125.00")
        assert report.turnover_ratio == Decimal("5")
        assert report.days_to_sell == Decimal("73")
        assert report.category == "Coffee"

    def test_product_held_nowhere(self, make_engine, products, sale_at):
        """Test a product with no stock rows reports zeros."""
        milk = products[1]
        engine = make_engine(
            products=[milk],
            sales=[sale(sale_at(date(2025, 3, 2)), items=[(milk.id, "3", "3.50")])],
        )
        (report,) = engine.generate_inventory_turnover_report(MARCH_1, MARCH_31)
        assert report.average_inventory == Decimal("0")
        assert report.turnover_ratio == Decimal("0")
        assert report.days_to_sell == Decimal("0")

    def test_unsold_product(self, make_engine, branches, products):
        """Test an unsold product has zero turnover."""
        cups = products[2]
        engine = make_engine(
            products=[cups],
            levels=[BranchInventory(branch_id=branches[0].id, product_id=cups.id, quantity=Decimal("100"))],
        )
        (report,) = engine.generate_inventory_turnover_report(MARCH_1, MARCH_31)
        assert report.cost_of_goods_sold == Decimal("0")
        assert report.turnover_ratio == Decimal("0")
        assert report.days_to_sell == Decimal("0")

    def test_sales_fetched_once(self, make_engine, products):
        """Test the sales window is read once, not per product."""
        class CountingSalesStore(InMemorySalesStore):
            calls = 0

            def list_by_date_range(self, date_range, branch_id=None):
                CountingSalesStore.calls += 1
                return super().list_by_date_range(date_range, branch_id)

        engine = make_engine(products=products, sales_store=CountingSalesStore())
        engine.generate_inventory_turnover_report(MARCH_1, MARCH_31)
        assert CountingSalesStore.calls == 1
