"""/v1/transactions - manual income and expense records"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Response

from wallet_gateway.api.dependencies import get_transaction_service
from wallet_gateway.api.v1.schemas import (
    TransactionListResponse,
    TransactionRequest,
    TransactionSchema,
    TransactionType,
)
from wallet_gateway.domain.models import TransactionDefinition
from wallet_gateway.services.transactions import TransactionService

router = APIRouter()


def _definition(body: TransactionRequest) -> TransactionDefinition:
    return TransactionDefinition(
        type=body.type,
        value=body.value,
        transaction_date=body.transaction_date,
        bank_account_id=body.bank_account_id,
        description=body.description,
        category_id=body.category_id or None,
    )


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    user_id: str = Query(..., description="User identifier"),
    month: Optional[str] = Query(None, description="YYYY-MM"),
    type: Optional[TransactionType] = Query(None),
    search: Optional[str] = Query(None, description="Matches description or category name"),
    service: TransactionService = Depends(get_transaction_service),
):
    """List transactions, newest first, with income/expense totals for the selection"""
    transactions = await service.list_transactions(user_id, month=month, type=type, search=search)
    return TransactionListResponse.from_domain(user_id, month, transactions)


@router.post("/transactions", response_model=TransactionSchema, status_code=201)
async def create_transaction(
    body: TransactionRequest,
    service: TransactionService = Depends(get_transaction_service),
):
    transaction = await service.create_transaction(body.user_id, _definition(body))
    return TransactionSchema.from_domain(transaction)


@router.get("/transactions/{transaction_id}", response_model=TransactionSchema)
async def get_transaction(
    transaction_id: str,
    user_id: str = Query(...),
    service: TransactionService = Depends(get_transaction_service),
):
    return TransactionSchema.from_domain(await service.get_transaction(user_id, transaction_id))


@router.put("/transactions/{transaction_id}", response_model=TransactionSchema)
async def update_transaction(
    transaction_id: str,
    body: TransactionRequest,
    service: TransactionService = Depends(get_transaction_service),
):
    transaction = await service.update_transaction(body.user_id, transaction_id, _definition(body))
    return TransactionSchema.from_domain(transaction)


@router.delete("/transactions/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: str,
    user_id: str = Query(...),
    service: TransactionService = Depends(get_transaction_service),
):
    await service.delete_transaction(user_id, transaction_id)
    return Response(status_code=204)
