"""
API Routers - Trial balance and financial reports.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_services
from app.application.container import LedgerServices
from app.application.dto.accounting_dto import (
    BranchFinancialReportDTO,
    CashFlowReportDTO,
    CategoryAmountDTO,
    InventoryReportDTO,
    InventoryTurnoverReportDTO,
    ProfitAndLossDTO,
    SalesReportDTO,
    TrialBalanceDTO,
)

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])


@router.get("/trial-balance", response_model=TrialBalanceDTO)
def get_trial_balance(
    as_of: date = Query(..., description="Balances as of this date (inclusive)"),
    services: LedgerServices = Depends(get_services),
):
    """
    Trial balance.

    Asset and expense accounts carry debit-normal balances, the others credit-normal.
    """
    return TrialBalanceDTO.from_domain(services.balances.trial_balance(as_of))


@router.get("/sales", response_model=SalesReportDTO)
def get_sales_report(
    start_date: date = Query(..., description="From date"),
    end_date: date = Query(..., description="To date"),
    services: LedgerServices = Depends(get_services),
):
    return SalesReportDTO.model_validate(services.reports.generate_sales_report(start_date, end_date))


@router.get("/inventory", response_model=InventoryReportDTO)
def get_inventory_report(services: LedgerServices = Depends(get_services)):
    return InventoryReportDTO.model_validate(services.reports.generate_inventory_report())


@router.get("/profit-and-loss", response_model=ProfitAndLossDTO)
def get_profit_and_loss(
    start_date: date = Query(..., description="From date"),
    end_date: date = Query(..., description="To date"),
    services: LedgerServices = Depends(get_services),
):
    return ProfitAndLossDTO.model_validate(
        services.reports.generate_profit_and_loss(start_date, end_date)
    )


@router.get("/cash-flow", response_model=CashFlowReportDTO)
def get_cash_flow(
    start_date: date = Query(..., description="From date"),
    end_date: date = Query(..., description="To date"),
    beginning_balance: Decimal | None = Query(None, description="Opening cash balance"),
    cash_account_id: UUID | None = Query(None, description="Derive the opening balance from this account"),
    services: LedgerServices = Depends(get_services),
):
    report = services.reports.generate_cash_flow_report(
        start_date,
        end_date,
        beginning_balance=beginning_balance,
        cash_account_id=cash_account_id,
    )
    return CashFlowReportDTO.model_validate(report)


@router.get("/branches", response_model=list[BranchFinancialReportDTO])
def get_branch_financials(
    start_date: date = Query(..., description="From date"),
    end_date: date = Query(..., description="To date"),
    services: LedgerServices = Depends(get_services),
):
    reports = services.reports.generate_branch_financial_report(start_date, end_date)
    return [BranchFinancialReportDTO.model_validate(r) for r in reports]


@router.get("/inventory-turnover", response_model=list[InventoryTurnoverReportDTO])
def get_inventory_turnover(
    start_date: date = Query(..., description="From date"),
    end_date: date = Query(..., description="To date"),
    services: LedgerServices = Depends(get_services),
):
    reports = services.reports.generate_inventory_turnover_report(start_date, end_date)
    return [InventoryTurnoverReportDTO.model_validate(r) for r in reports]


@router.get("/branches/{branch_id}/expenses-by-category", response_model=list[CategoryAmountDTO])
def get_branch_expenses_by_category(
    branch_id: UUID,
    start_date: date | None = Query(None, description="From date"),
    end_date: date | None = Query(None, description="To date"),
    services: LedgerServices = Depends(get_services),
):
    """Branch expenses grouped by category; all dates when no window is given."""
    breakdown = services.reports.generate_expenses_by_category(branch_id, start_date, end_date)
    return [CategoryAmountDTO.model_validate(c) for c in breakdown]
