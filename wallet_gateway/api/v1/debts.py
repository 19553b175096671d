"""/v1/debts - debt CRUD, interest-accrued balances and payments"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from wallet_gateway.api.dependencies import get_debt_service, get_request_id
from wallet_gateway.api.v1.schemas import (
    DebtCreateRequest,
    DebtListResponse,
    DebtSchema,
    DebtSummarySchema,
    DebtUpdateRequest,
    PaymentRequest,
    PaymentResponse,
    TransactionSchema,
)
from wallet_gateway.domain.debts import summarize_debts
from wallet_gateway.domain.exceptions import NotFoundError, PartialWriteError, RecordStoreError, ValidationError
from wallet_gateway.infrastructure.observability.metrics import record_store_failures_counter
from wallet_gateway.services.debts import DebtService
from wallet_gateway.utils.date_utils import utc_now

router = APIRouter()


@router.get("/debts", response_model=DebtListResponse)
async def list_debts(
    user_id: str = Query(..., description="User identifier"),
    service: DebtService = Depends(get_debt_service),
):
    """
    List a user's debts, newest first.

    Each debt carries the amount owed right now (with interest), payment
    progress and days until due; `summary` holds the dashboard totals.
    """
    now = utc_now()
    debts = await service.list_debts(user_id)
    return DebtListResponse(
        user_id=user_id,
        debts=[DebtSchema.from_domain(d, now) for d in debts],
        summary=DebtSummarySchema.from_domain(summarize_debts(debts, now)),
    )


@router.post("/debts", response_model=DebtSchema, status_code=201)
async def create_debt(body: DebtCreateRequest, service: DebtService = Depends(get_debt_service)):
    debt = await service.create_debt(
        user_id=body.user_id,
        name=body.name,
        original_amount=body.original_amount,
        monthly_interest_rate=body.monthly_interest_rate,
        due_date=body.due_date,
        creditor=body.creditor,
        description=body.description,
    )
    return DebtSchema.from_domain(debt, utc_now())


@router.get("/debts/{debt_id}", response_model=DebtSchema)
async def get_debt(
    debt_id: str,
    user_id: str = Query(...),
    service: DebtService = Depends(get_debt_service),
):
    debt = await service.get_debt(user_id, debt_id)
    return DebtSchema.from_domain(debt, utc_now())


@router.patch("/debts/{debt_id}", response_model=DebtSchema)
async def update_debt(
    debt_id: str,
    body: DebtUpdateRequest,
    service: DebtService = Depends(get_debt_service),
):
    debt = await service.update_debt(
        user_id=body.user_id,
        debt_id=debt_id,
        name=body.name,
        monthly_interest_rate=body.monthly_interest_rate,
        due_date=body.due_date,
        creditor=body.creditor,
        description=body.description,
    )
    return DebtSchema.from_domain(debt, utc_now())


@router.delete("/debts/{debt_id}", status_code=204)
async def delete_debt(
    debt_id: str,
    user_id: str = Query(...),
    service: DebtService = Depends(get_debt_service),
):
    await service.delete_debt(user_id, debt_id)
    return Response(status_code=204)


@router.post("/debts/{debt_id}/payments", response_model=PaymentResponse, status_code=201)
async def pay_debt(
    debt_id: str,
    body: PaymentRequest,
    request: Request,
    service: DebtService = Depends(get_debt_service),
):
    """
    Pay part or all of a debt.

    Flow:
    1. Work out the amount owed now (interest included) and validate the payment
    2. Insert the expense transaction against the chosen bank account
    3. Set current_amount = owed - payment and stamp last_payment_date

    Steps 2 and 3 are separate writes: a 502 means the expense was stored but
    the debt was not reduced.
    """
    request_id = get_request_id(request)

    try:
        result = await service.pay_debt(
            user_id=body.user_id,
            debt_id=debt_id,
            amount=body.amount,
            bank_account_id=body.bank_account_id,
            description=body.description,
            request_id=request_id,
        )

    except ValidationError as e:
        logging.warning(f"Payment rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except PartialWriteError as e:
        record_store_failures_counter.labels(operation="debt_payment").inc()
        logging.error(f"Partial debt payment: {e}", extra={"request_id": request_id})
        raise HTTPException(
            status_code=502,
            detail={"message": str(e), "completed_steps": e.completed_steps},
        )

    except RecordStoreError as e:
        record_store_failures_counter.labels(operation="debt_payment").inc()
        logging.error(f"Record store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Record store unavailable")

    return PaymentResponse(
        debt_id=debt_id,
        amount_paid=float(result.transaction.value),
        amount_before=float(result.amount_before),
        new_current_amount=float(result.new_current_amount),
        last_payment_date=result.last_payment_date,
        transaction=TransactionSchema.from_domain(result.transaction),
    )
