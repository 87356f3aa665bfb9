"""
API Routers - Chart of accounts.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_services
from app.application.container import LedgerServices
from app.application.dto.accounting_dto import AccountCreateDTO, AccountResponseDTO

router = APIRouter(prefix="/api/v1/accounts", tags=["Chart of accounts"])


@router.post("", response_model=AccountResponseDTO, status_code=status.HTTP_201_CREATED)
def create_account(dto: AccountCreateDTO, services: LedgerServices = Depends(get_services)):
    """
    Create an account.

    - Account code must be unique
    - Parent account, when given, must exist
    """
    account = services.registry.create_account(
        code=dto.code,
        name=dto.name,
        account_type=dto.account_type,
        parent_id=dto.parent_id,
    )
    return AccountResponseDTO.model_validate(account)


@router.get("", response_model=list[AccountResponseDTO])
def list_accounts(
    order_by: str = Query("code", description="code or name"),
    services: LedgerServices = Depends(get_services),
):
    """Chart of accounts, ordered by code by default."""
    return [AccountResponseDTO.model_validate(a) for a in services.registry.list_accounts(order_by)]


@router.get("/{account_id}", response_model=AccountResponseDTO)
def get_account(account_id: UUID, services: LedgerServices = Depends(get_services)):
    return AccountResponseDTO.model_validate(services.registry.get_account(account_id))


@router.get("/{account_id}/children", response_model=list[AccountResponseDTO])
def list_child_accounts(account_id: UUID, services: LedgerServices = Depends(get_services)):
    """Direct sub-accounts of an account."""
    services.registry.get_account(account_id)
    return [AccountResponseDTO.model_validate(a) for a in services.registry.children_of(account_id)]
