"""
API DTOs - Data Transfer Objects for API requests/responses.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.reports import TrialBalance
from app.domain.value_objects import AccountType


class AccountCreateDTO(BaseModel):
    """DTO - Create an account in the chart of accounts."""
    code: str = Field(..., min_length=1, max_length=32, description="Unique account code")
    name: str = Field(..., min_length=1, max_length=200, description="Account name")
    account_type: AccountType = Field(..., description="ASSET, LIABILITY, EQUITY, REVENUE or EXPENSE")
    parent_id: UUID | None = Field(None, description="Parent account")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "code": "1010",
            "name": "Cash on Hand",
            "account_type": "ASSET",
            "parent_id": None
        }
    })


class AccountResponseDTO(BaseModel):
    """DTO - Account."""
    id: UUID
    code: str
    name: str
    account_type: AccountType
    parent_id: UUID | None

    model_config = ConfigDict(from_attributes=True)


class JournalLineCreateDTO(BaseModel):
    """DTO - Journal entry line."""
    account_id: UUID = Field(..., description="Account debited or credited")
    description: str | None = Field(None, description="Line narration")
    debit: Decimal = Field(Decimal("0"), ge=0, description="Debit amount")
    credit: Decimal = Field(Decimal("0"), ge=0, description="Credit amount")


class JournalEntryCreateDTO(BaseModel):
    """DTO - Post a journal entry."""
    entry_number: str = Field(..., min_length=1, max_length=64, description="Unique entry number")
    entry_date: date = Field(..., description="Entry date")
    account_id: UUID = Field(..., description="Primary (context) account")
    description: str | None = Field(None, max_length=500)
    reference: str | None = Field(None, max_length=100, description="Invoice / document reference")
    lines: list[JournalLineCreateDTO] = Field(..., min_length=1, description="Entry lines")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "entry_number": "JE-2025-0001",
            "entry_date": "2025-12-15",
            "account_id": "00000000-0000-0000-0000-000000000001",
            "description": "Owner capital contribution",
            "reference": "DEP-001",
            "lines": [
                {"account_id": "00000000-0000-0000-0000-000000000001", "debit": 1000, "credit": 0},
                {"account_id": "00000000-0000-0000-0000-000000000002", "debit": 0, "credit": 1000}
            ]
        }
    })


class JournalEntryReverseDTO(BaseModel):
    """DTO - Reverse a posted entry with a new offsetting entry."""
    entry_number: str = Field(..., min_length=1, max_length=64)
    entry_date: date
    description: str | None = Field(None, max_length=500)


class JournalEntryLineResponseDTO(BaseModel):
    id: UUID
    journal_entry_id: UUID
    account_id: UUID
    description: str | None
    debit: Decimal
    credit: Decimal

    model_config = ConfigDict(from_attributes=True)


class JournalEntryResponseDTO(BaseModel):
    """DTO - Posted journal entry with its lines."""
    id: UUID
    entry_number: str
    entry_date: date
    description: str | None
    reference: str | None
    account_id: UUID
    total_debits: Decimal
    total_credits: Decimal
    lines: list[JournalEntryLineResponseDTO]

    model_config = ConfigDict(from_attributes=True)


class TrialBalanceLineDTO(BaseModel):
    account_id: UUID
    code: str
    name: str
    account_type: AccountType
    balance: Decimal


class TrialBalanceDTO(BaseModel):
    """DTO - Trial balance."""
    as_of: date
    accounts: list[TrialBalanceLineDTO]
    debit_normal_total: Decimal
    credit_normal_total: Decimal
    is_balanced: bool

    @classmethod
    def from_domain(cls, trial_balance: TrialBalance) -> "TrialBalanceDTO":
        rows = sorted(trial_balance.balances.values(), key=lambda b: b.account.code)
        return cls(
            as_of=trial_balance.as_of,
            accounts=[
                TrialBalanceLineDTO(
                    account_id=row.account.id,
                    code=row.account.code,
                    name=row.account.name,
                    account_type=row.account.account_type,
                    balance=row.balance,
                )
                for row in rows
            ],
            debit_normal_total=trial_balance.debit_normal_total,
            credit_normal_total=trial_balance.credit_normal_total,
            is_balanced=trial_balance.is_balanced(),
        )


class ProductSalesDTO(BaseModel):
    product_id: UUID
    product_name: str
    quantity: Decimal
    revenue: Decimal

    model_config = ConfigDict(from_attributes=True)


class SalesReportDTO(BaseModel):
    """DTO - Sales report."""
    total_sales: Decimal
    sales_by_payment_type: dict[str, Decimal]
    sales_by_date: dict[str, Decimal]
    top_products: list[ProductSalesDTO]

    model_config = ConfigDict(from_attributes=True)


class LowStockItemDTO(BaseModel):
    product_id: UUID
    product_name: str
    current_quantity: Decimal
    low_stock_at: Decimal

    model_config = ConfigDict(from_attributes=True)


class CategoryValueDTO(BaseModel):
    category: str
    value: Decimal

    model_config = ConfigDict(from_attributes=True)


class InventoryReportDTO(BaseModel):
    """DTO - Inventory valuation report."""
    total_value: Decimal
    low_stock_items: list[LowStockItemDTO]
    by_category: list[CategoryValueDTO]

    model_config = ConfigDict(from_attributes=True)


class CategoryAmountDTO(BaseModel):
    category: str
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class ProfitAndLossDTO(BaseModel):
    """DTO - Profit and loss statement."""
    revenue: Decimal
    expenses: Decimal
    net_income: Decimal
    by_category: list[CategoryAmountDTO]

    model_config = ConfigDict(from_attributes=True)


class CashFlowReportDTO(BaseModel):
    """DTO - Cash flow report."""
    beginning_balance: Decimal
    cash_inflow: Decimal
    cash_outflow: Decimal
    net_change: Decimal
    ending_balance: Decimal

    model_config = ConfigDict(from_attributes=True)


class BranchFinancialReportDTO(BaseModel):
    """DTO - Financial summary of one branch."""
    branch_id: UUID
    branch_name: str
    sales: Decimal
    expenses: Decimal
    net_income: Decimal
    inventory_value: Decimal
    profit_margin: Decimal

    model_config = ConfigDict(from_attributes=True)


class InventoryTurnoverReportDTO(BaseModel):
    """DTO - Inventory turnover of one product."""
    product_id: UUID
    product_name: str
    category: str
    average_inventory: Decimal
    cost_of_goods_sold: Decimal
    turnover_ratio: Decimal
    days_to_sell: Decimal

    model_config = ConfigDict(from_attributes=True)


class ErrorResponseDTO(BaseModel):
    code: str
    detail: str
