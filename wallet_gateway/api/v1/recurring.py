"""/v1/recurring-transactions - recurring series lifecycle"""

from fastapi import APIRouter, Depends, Query, Response

from wallet_gateway.api.dependencies import get_recurring_service
from wallet_gateway.api.v1.schemas import (
    FiredResponse,
    RecurringListResponse,
    RecurringRequest,
    RecurringSchema,
    TransactionSchema,
    UserScopedRequest,
)
from wallet_gateway.domain.models import RecurringDefinition
from wallet_gateway.domain.recurring import is_active
from wallet_gateway.services.recurring import FiredSeries, RecurringService
from wallet_gateway.utils.date_utils import utc_today

router = APIRouter()


def _definition(body: RecurringRequest) -> RecurringDefinition:
    return RecurringDefinition(
        type=body.type,
        value=body.value,
        description=body.description,
        frequency=body.frequency,
        start_date=body.start_date,
        end_date=body.end_date,
        bank_account_id=body.bank_account_id,
        category_id=body.category_id or None,
    )


def _fired(fired: FiredSeries) -> FiredResponse:
    return FiredResponse(
        recurring_transaction=RecurringSchema.from_domain(fired.series, utc_today()),
        transaction=TransactionSchema.from_domain(fired.transaction) if fired.transaction else None,
    )


@router.get("/recurring-transactions", response_model=RecurringListResponse)
async def list_recurring(
    user_id: str = Query(..., description="User identifier"),
    service: RecurringService = Depends(get_recurring_service),
):
    """
    List series by next occurrence, split into active and inactive.

    Overdue series are only flagged; listing never fires anything.
    """
    today = utc_today()
    series = await service.list_series(user_id)
    return RecurringListResponse(
        user_id=user_id,
        active=[RecurringSchema.from_domain(s, today) for s in series if is_active(s.end_date, today)],
        inactive=[RecurringSchema.from_domain(s, today) for s in series if not is_active(s.end_date, today)],
    )


@router.post("/recurring-transactions", response_model=FiredResponse, status_code=201)
async def create_recurring(body: RecurringRequest, service: RecurringService = Depends(get_recurring_service)):
    """Create a series; if it is already due, its first occurrence is recorded at once"""
    fired = await service.create_series(body.user_id, _definition(body))
    return _fired(fired)


@router.put("/recurring-transactions/{series_id}", response_model=RecurringSchema)
async def update_recurring(
    series_id: str,
    body: RecurringRequest,
    service: RecurringService = Depends(get_recurring_service),
):
    series = await service.update_series(body.user_id, series_id, _definition(body))
    return RecurringSchema.from_domain(series, utc_today())


@router.post("/recurring-transactions/{series_id}/execute", response_model=FiredResponse)
async def execute_recurring(
    series_id: str,
    body: UserScopedRequest,
    service: RecurringService = Depends(get_recurring_service),
):
    fired = await service.execute_now(body.user_id, series_id)
    return _fired(fired)


@router.post("/recurring-transactions/{series_id}/pause", response_model=RecurringSchema)
async def pause_recurring(
    series_id: str,
    body: UserScopedRequest,
    service: RecurringService = Depends(get_recurring_service),
):
    series = await service.pause(body.user_id, series_id)
    return RecurringSchema.from_domain(series, utc_today())


@router.post("/recurring-transactions/{series_id}/reactivate", response_model=RecurringSchema)
async def reactivate_recurring(
    series_id: str,
    body: UserScopedRequest,
    service: RecurringService = Depends(get_recurring_service),
):
    series = await service.reactivate(body.user_id, series_id)
    return RecurringSchema.from_domain(series, utc_today())


@router.delete("/recurring-transactions/{series_id}", status_code=204)
async def delete_recurring(
    series_id: str,
    user_id: str = Query(...),
    service: RecurringService = Depends(get_recurring_service),
):
    await service.delete_series(user_id, series_id)
    return Response(status_code=204)
