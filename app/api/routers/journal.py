"""
API Routers - Journal entries.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_services
from app.application.container import LedgerServices
from app.application.dto.accounting_dto import (
    JournalEntryCreateDTO,
    JournalEntryResponseDTO,
    JournalEntryReverseDTO,
)
from app.domain.value_objects import DateRange, JournalLineDetail

router = APIRouter(prefix="/api/v1/journal-entries", tags=["Journal entries"])


@router.post("", response_model=JournalEntryResponseDTO, status_code=status.HTTP_201_CREATED)
def post_journal_entry(dto: JournalEntryCreateDTO, services: LedgerServices = Depends(get_services)):
    """
    Post a journal entry.

    - Total debits must equal total credits (tolerance 0.01)
    - Every referenced account must exist
    - Header and lines are written in one transaction
    """
    entry = services.ledger.post(
        entry_number=dto.entry_number,
        entry_date=dto.entry_date,
        account_id=dto.account_id,
        description=dto.description,
        reference=dto.reference,
        lines=[
            JournalLineDetail(
                account_id=line.account_id,
                debit=line.debit,
                credit=line.credit,
                description=line.description,
            )
            for line in dto.lines
        ],
    )
    return JournalEntryResponseDTO.model_validate(entry)


@router.get("", response_model=list[JournalEntryResponseDTO])
def list_journal_entries(
    start_date: date | None = None,
    end_date: date | None = None,
    services: LedgerServices = Depends(get_services),
):
    """Journal entries, newest first."""
    date_range = None
    if start_date or end_date:
        date_range = DateRange(start_date or date.min, end_date or date.max)
    return [JournalEntryResponseDTO.model_validate(e) for e in services.ledger.list_entries(date_range)]


@router.get("/{entry_id}", response_model=JournalEntryResponseDTO)
def get_journal_entry(entry_id: UUID, services: LedgerServices = Depends(get_services)):
    return JournalEntryResponseDTO.model_validate(services.ledger.get_entry(entry_id))


@router.post(
    "/{entry_id}/reverse",
    response_model=JournalEntryResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
def reverse_journal_entry(
    entry_id: UUID,
    dto: JournalEntryReverseDTO,
    services: LedgerServices = Depends(get_services),
):
    """Post an offsetting entry; the original stays untouched."""
    entry = services.ledger.reverse(
        entry_id=entry_id,
        entry_number=dto.entry_number,
        entry_date=dto.entry_date,
        description=dto.description,
    )
    return JournalEntryResponseDTO.model_validate(entry)
