"""/v1/bank-accounts and /v1/categories - account lookups and transfers"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from wallet_gateway.api.dependencies import get_account_service, get_transaction_service
from wallet_gateway.api.v1.schemas import (
    BankAccountListResponse,
    BankAccountSchema,
    CategoryListResponse,
    CategorySchema,
    TransactionType,
    TransferRequest,
    TransferResponse,
)
from wallet_gateway.services.accounts import AccountService
from wallet_gateway.services.transactions import TransactionService

router = APIRouter()


@router.get("/bank-accounts", response_model=BankAccountListResponse)
async def list_bank_accounts(
    user_id: str = Query(..., description="User identifier"),
    service: AccountService = Depends(get_account_service),
):
    """
    Bank accounts with balances derived from their transactions.

    Balances are informational; debt payments do not check them.
    """
    balances = await service.list_balances(user_id)
    return BankAccountListResponse(
        user_id=user_id,
        accounts=[BankAccountSchema.from_domain(b) for b in balances],
    )


@router.post("/bank-accounts/transfers", response_model=TransferResponse, status_code=201)
async def transfer(
    body: TransferRequest,
    service: TransactionService = Depends(get_transaction_service),
):
    """
    Move money between two of the user's accounts.

    Recorded as an expense on the source and an income on the destination.
    The source balance must cover the amount.
    """
    result = await service.transfer(
        body.user_id,
        body.from_account_id,
        body.to_account_id,
        body.amount,
        body.description,
    )
    return TransferResponse.from_domain(result)


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(
    user_id: str = Query(..., description="User identifier"),
    type: Optional[TransactionType] = Query(None),
    service: AccountService = Depends(get_account_service),
):
    categories = await service.list_categories(user_id, type)
    return CategoryListResponse(
        user_id=user_id,
        categories=[CategorySchema.from_domain(c) for c in categories],
    )
