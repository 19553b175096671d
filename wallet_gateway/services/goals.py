"""Financial goals and their contributions against the record store"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from wallet_gateway.domain import goals
from wallet_gateway.domain.exceptions import NotFoundError, PartialWriteError, RecordStoreError
from wallet_gateway.domain.models import FinancialGoal, GoalContribution, GoalDefinition, GoalStatus
from wallet_gateway.infrastructure.observability.logging import log_goal_contribution
from wallet_gateway.infrastructure.observability.metrics import record_contribution
from wallet_gateway.infrastructure.records import (
    FINANCIAL_GOALS,
    GOAL_PROGRESS,
    contribution_from_record,
    contribution_to_record,
    goal_from_record,
    goal_to_record,
)
from wallet_gateway.infrastructure.store import Order, RecordStore, eq, select_all
from wallet_gateway.utils.date_utils import utc_now


@dataclass
class RecordedContribution:
    contribution: GoalContribution
    merged: bool
    status: GoalStatus


class GoalService:
    def __init__(self, store: RecordStore):
        self.store = store

    def _scope(self, user_id: str, goal_id: str):
        return [eq("id", goal_id), eq("user_id", user_id)]

    async def _contributions(self, user_id: str, goal_id: Optional[str] = None) -> List[GoalContribution]:
        filters = [eq("user_id", user_id)]
        if goal_id is not None:
            filters.append(eq("goal_id", goal_id))
        rows = await select_all(self.store, GOAL_PROGRESS, filters, Order("progress_date"))
        return [contribution_from_record(row) for row in rows]

    async def get_goal(self, user_id: str, goal_id: str) -> FinancialGoal:
        rows = await self.store.select(FINANCIAL_GOALS, self._scope(user_id, goal_id), limit=1)
        if not rows:
            raise NotFoundError(f"Financial goal {goal_id} not found")
        return goal_from_record(rows[0])

    async def list_goals(self, user_id: str, now: Optional[datetime] = None) -> List[GoalStatus]:
        """Goals newest first, each with progress summed from all its contributions"""
        now = now or utc_now()
        rows = await self.store.select(
            FINANCIAL_GOALS, [eq("user_id", user_id)], Order("created_at", ascending=False)
        )

        by_goal = defaultdict(list)
        for contribution in await self._contributions(user_id):
            by_goal[contribution.goal_id].append(contribution)

        statuses = []
        for row in rows:
            goal = goal_from_record(row)
            statuses.append(goals.compute_status(goal, by_goal[goal.id], now))
        return statuses

    async def get_status(self, user_id: str, goal_id: str, now: Optional[datetime] = None) -> GoalStatus:
        goal = await self.get_goal(user_id, goal_id)
        return goals.compute_status(goal, await self._contributions(user_id, goal_id), now or utc_now())

    async def list_contributions(self, user_id: str, goal_id: str) -> List[GoalContribution]:
        await self.get_goal(user_id, goal_id)
        return await self._contributions(user_id, goal_id)

    async def create_goal(self, user_id: str, definition: GoalDefinition) -> FinancialGoal:
        goals.validate_goal(definition)
        goal = FinancialGoal(
            id="",
            user_id=user_id,
            type=definition.type,
            target_value=definition.target_value,
            start_period=definition.start_period,
            end_period=definition.end_period,
            category_id=definition.category_id or None,
        )
        rows = await self.store.insert(FINANCIAL_GOALS, [goal_to_record(goal)])
        return goal_from_record(rows[0])

    async def update_goal(self, user_id: str, goal_id: str, definition: GoalDefinition) -> FinancialGoal:
        """Replace the goal's fields; recorded contributions are kept as they are"""
        goals.validate_goal(definition)
        current = await self.get_goal(user_id, goal_id)
        current.type = definition.type
        current.target_value = definition.target_value
        current.start_period = definition.start_period
        current.end_period = definition.end_period
        current.category_id = definition.category_id or None

        rows = await self.store.update(FINANCIAL_GOALS, self._scope(user_id, goal_id), goal_to_record(current))
        if not rows:
            raise NotFoundError(f"Financial goal {goal_id} not found")
        return goal_from_record(rows[0])

    async def delete_goal(self, user_id: str, goal_id: str) -> None:
        """Delete the contributions first, then the goal itself"""
        await self.get_goal(user_id, goal_id)
        await self.store.delete(GOAL_PROGRESS, [eq("goal_id", goal_id), eq("user_id", user_id)])
        try:
            await self.store.delete(FINANCIAL_GOALS, self._scope(user_id, goal_id))
        except RecordStoreError as e:
            logging.error(f"Goal delete failed after its progress was removed: {e}", extra={"goal_id": goal_id})
            raise PartialWriteError(
                f"Progress of goal {goal_id} deleted but the goal was not",
                completed_steps=["delete_progress"],
            ) from e

    async def add_contribution(
        self,
        user_id: str,
        goal_id: str,
        value: Decimal,
        progress_date: date,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> RecordedContribution:
        """
        Record progress towards a goal.

        A contribution on a date that already has one is added to that row
        instead of creating a second one.

        Raises:
            ValidationError: value <= 0 or date outside the goal period
            NotFoundError: unknown goal
        """
        goal = await self.get_goal(user_id, goal_id)
        existing_rows = await self.store.select(
            GOAL_PROGRESS,
            [eq("goal_id", goal_id), eq("user_id", user_id), eq("progress_date", progress_date)],
            limit=1,
        )
        existing = contribution_from_record(existing_rows[0]) if existing_rows else None

        planned = goals.plan_contribution(user_id, goal, value, progress_date, description, existing)

        if existing is not None:
            rows = await self.store.update(
                GOAL_PROGRESS,
                [eq("id", existing.id)],
                {"value": planned.value, "description": planned.description},
            )
        else:
            rows = await self.store.insert(GOAL_PROGRESS, [contribution_to_record(planned)])
        contribution = contribution_from_record(rows[0]) if rows else planned

        merged = existing is not None
        record_contribution(merged)
        log_goal_contribution(user_id, goal_id, value, progress_date, merged)

        status = await self.get_status(user_id, goal_id, now)
        return RecordedContribution(contribution=contribution, merged=merged, status=status)
