"""Application layer - Use cases and DTOs."""

from app.application.dto.accounting_dto import (
    AccountCreateDTO,
    AccountResponseDTO,
    CashFlowReportDTO,
    InventoryReportDTO,
    JournalEntryCreateDTO,
    JournalEntryResponseDTO,
    ProfitAndLossDTO,
    SalesReportDTO,
    TrialBalanceDTO,
)
from app.application.container import LedgerServices, build_services
