"""/v1/goals - financial goals and progress towards them"""

from fastapi import APIRouter, Depends, Query, Response

from wallet_gateway.api.dependencies import get_goal_service
from wallet_gateway.api.v1.schemas import (
    ContributionListResponse,
    ContributionRequest,
    ContributionResponse,
    ContributionSchema,
    GoalListResponse,
    GoalRequest,
    GoalSchema,
)
from wallet_gateway.domain.goals import compute_status
from wallet_gateway.domain.models import GoalDefinition
from wallet_gateway.services.goals import GoalService
from wallet_gateway.utils.date_utils import utc_now

router = APIRouter()


def _definition(body: GoalRequest) -> GoalDefinition:
    return GoalDefinition(
        type=body.type,
        target_value=body.target_value,
        start_period=body.start_period,
        end_period=body.end_period,
        category_id=body.category_id or None,
    )


@router.get("/goals", response_model=GoalListResponse)
async def list_goals(
    user_id: str = Query(..., description="User identifier"),
    service: GoalService = Depends(get_goal_service),
):
    statuses = await service.list_goals(user_id)
    return GoalListResponse(
        user_id=user_id,
        income=[GoalSchema.from_domain(s) for s in statuses if s.goal.type == "income"],
        expense=[GoalSchema.from_domain(s) for s in statuses if s.goal.type == "expense"],
    )


@router.post("/goals", response_model=GoalSchema, status_code=201)
async def create_goal(body: GoalRequest, service: GoalService = Depends(get_goal_service)):
    goal = await service.create_goal(body.user_id, _definition(body))
    return GoalSchema.from_domain(compute_status(goal, [], utc_now()))


@router.get("/goals/{goal_id}", response_model=GoalSchema)
async def get_goal(
    goal_id: str,
    user_id: str = Query(...),
    service: GoalService = Depends(get_goal_service),
):
    return GoalSchema.from_domain(await service.get_status(user_id, goal_id))


@router.put("/goals/{goal_id}", response_model=GoalSchema)
async def update_goal(
    goal_id: str,
    body: GoalRequest,
    service: GoalService = Depends(get_goal_service),
):
    await service.update_goal(body.user_id, goal_id, _definition(body))
    return GoalSchema.from_domain(await service.get_status(body.user_id, goal_id))


@router.delete("/goals/{goal_id}", status_code=204)
async def delete_goal(
    goal_id: str,
    user_id: str = Query(...),
    service: GoalService = Depends(get_goal_service),
):
    """Delete a goal together with all of its recorded progress"""
    await service.delete_goal(user_id, goal_id)
    return Response(status_code=204)


@router.get("/goals/{goal_id}/progress", response_model=ContributionListResponse)
async def list_progress(
    goal_id: str,
    user_id: str = Query(...),
    service: GoalService = Depends(get_goal_service),
):
    contributions = await service.list_contributions(user_id, goal_id)
    return ContributionListResponse(
        goal_id=goal_id,
        contributions=[ContributionSchema.from_domain(c) for c in contributions],
    )


@router.post("/goals/{goal_id}/progress", response_model=ContributionResponse, status_code=201)
async def add_progress(
    goal_id: str,
    body: ContributionRequest,
    service: GoalService = Depends(get_goal_service),
):
    """
    Record a contribution dated inside the goal period.

    A second contribution on the same date is added to the existing one
    (`merged` is true) rather than stored separately.
    """
    recorded = await service.add_contribution(
        body.user_id,
        goal_id,
        value=body.value,
        progress_date=body.progress_date,
        description=body.description,
    )
    return ContributionResponse(
        contribution=ContributionSchema.from_domain(recorded.contribution),
        merged=recorded.merged,
        goal=GoalSchema.from_domain(recorded.status),
    )
