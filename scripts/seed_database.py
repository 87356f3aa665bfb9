#!/usr/bin/env python3
"""
Database Seeding Script - demo chart of accounts, branches, products,
stock, sales, expenses and journal entries for local testing.
"""

import sys
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal


def main():
    """Main function."""
    print("=" * 60)
    print("Database Seeding - Ledger demo data")
    print("=" * 60)

    from app.application.container import build_services
    from app.infrastructure.database import SessionLocal, init_db, seed_default_accounts
    from app.infrastructure.database.models import (
        Branch,
        BranchInventory,
        Expense,
        InventoryItem,
        Product,
        SalesLineItem,
        SalesTransaction,
    )
    from app.domain.value_objects import JournalLineDetail

    init_db()
    created = seed_default_accounts(SessionLocal)
    print(f"Chart of accounts: {created} accounts created")

    db = SessionLocal()
    try:
        if db.query(Branch).count():
            print("Demo data already present, skipping.")
            return 0

        branches = [
            Branch(name="Downtown", address="1 Main St", phone="555-0100"),
            Branch(name="Harbour", address="22 Dock Rd", phone="555-0200"),
        ]
        products = [
            Product(name="Espresso Beans 1kg", sku="BEAN-1", price=Decimal("24.00"),
                    cost_price=Decimal("12.50"), category="Coffee"),
            Product(name="Oat Milk 1L", sku="MILK-OAT", price=Decimal("3.50"),
                    cost_price=Decimal("1.80"), category="Dairy Alternatives"),
            Product(name="Paper Cups (100)", sku="CUP-100", price=Decimal("9.00"),
                    cost_price=Decimal("4.00"), category="Supplies"),
        ]
        db.add_all(branches + products)
        db.flush()

        for product, (qty, low) in zip(products, [(40, 10), (6, 12), (150, 50)]):
            db.add(InventoryItem(product_id=product.id, quantity=Decimal(qty), low_stock_at=Decimal(low)))
            for branch in branches:
                db.add(BranchInventory(branch_id=branch.id, product_id=product.id,
                                       quantity=Decimal(qty) / 2))

        today = datetime.now(timezone.utc).replace(hour=12, minute=0, second=0, microsecond=0)
        for day in range(7):
            for branch, payment in zip(branches, ["CASH", "CARD"]):
                sale = SalesTransaction(branch_id=branch.id, payment_type=payment,
                                        created_at=today - timedelta(days=day))
                items = [
                    SalesLineItem(transaction_id=sale.id, product_id=products[0].id,
                                  quantity=Decimal("2"), price=products[0].price),
                    SalesLineItem(transaction_id=sale.id, product_id=products[1].id,
                                  quantity=Decimal("3"), price=products[1].price),
                ]
                sale.total_amount = sum((i.quantity * i.price for i in items), Decimal("0"))
                db.add(sale)
                db.add_all(items)

        for branch in branches:
            db.add(Expense(branch_id=branch.id, category="Rent", amount=Decimal("800.00"),
                           expense_date=today.date() - timedelta(days=3)))
            db.add(Expense(branch_id=branch.id, category="Utilities", amount=Decimal("120.00"),
                           expense_date=today.date() - timedelta(days=1)))
        db.commit()
        print(f"Branches: {len(branches)}, products: {len(products)}")
    finally:
        db.close()

    services = build_services(SessionLocal)
    by_code = {a.code: a for a in services.registry.list_accounts()}
    cash, capital, rent = by_code["1010"], by_code["3010"], by_code["5020"]

    services.ledger.post(
        entry_number="JE-0001",
        entry_date=date.today() - timedelta(days=10),
        account_id=cash.id,
        description="Owner capital contribution",
        lines=[
            JournalLineDetail(account_id=cash.id, debit=Decimal("10000")),
            JournalLineDetail(account_id=capital.id, credit=Decimal("10000")),
        ],
    )
    services.ledger.post(
        entry_number="JE-0002",
        entry_date=date.today() - timedelta(days=3),
        account_id=rent.id,
        description="Monthly rent",
        lines=[
            JournalLineDetail(account_id=rent.id, debit=Decimal("1600")),
            JournalLineDetail(account_id=cash.id, credit=Decimal("1600")),
        ],
    )
    print("Journal entries: 2 posted")

    trial_balance = services.balances.trial_balance(date.today())
    print(f"Trial balance balanced: {trial_balance.is_balanced()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
