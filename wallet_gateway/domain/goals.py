"""Financial goal progress and contributions"""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from wallet_gateway.domain.exceptions import ValidationError
from wallet_gateway.domain.models import (
    EXPENSE,
    INCOME,
    FinancialGoal,
    GoalContribution,
    GoalDefinition,
    GoalStatus,
)
from wallet_gateway.utils.date_utils import days_until


def validate_goal(definition: GoalDefinition) -> None:
    if definition.type not in (INCOME, EXPENSE):
        raise ValidationError(f"Unknown goal type: {definition.type!r}")
    if definition.target_value is None or definition.target_value <= 0:
        raise ValidationError("Target value must be positive")
    if definition.start_period is None or definition.end_period is None:
        raise ValidationError("Start and end of the goal period are required")
    if definition.end_period < definition.start_period:
        raise ValidationError("Goal period ends before it starts")


def compute_status(
    goal: FinancialGoal,
    contributions: Iterable[GoalContribution],
    now: datetime,
) -> GoalStatus:
    """
    Progress of a goal from its recorded contributions.

    Requirements:
    - current value = sum of contributions
    - progress = current / target × 100, capped at 100
    - remaining days count up to midnight UTC of the period end, rounded up
    - completed once the current value reaches the target

    Example:
        target 1000, contributions 300 + 450 → 75.0%, not completed
    """
    current = sum((c.value for c in contributions), Decimal(0))

    if goal.target_value > 0:
        percentage = float(current / goal.target_value * 100)
    else:
        percentage = 100.0

    return GoalStatus(
        goal=goal,
        current_value=current,
        progress_percent=min(percentage, 100.0),
        remaining_days=days_until(goal.end_period, now),
        is_completed=current >= goal.target_value,
    )


def default_contribution_description(goal: FinancialGoal) -> str:
    return f"Goal progress: {'Income' if goal.type == INCOME else 'Expense'}"


def plan_contribution(
    user_id: str,
    goal: FinancialGoal,
    value: Decimal,
    progress_date: date,
    description: Optional[str],
    existing: Optional[GoalContribution] = None,
) -> GoalContribution:
    """
    Work out the contribution row to write.

    A second contribution on the same date is folded into the existing row:
    values are added and descriptions joined with " + ". Otherwise a new row
    is returned (id None).

    Raises:
        ValidationError: non-positive value, or a date outside the goal period
    """
    if value is None or value <= 0:
        raise ValidationError("Contribution value must be positive")
    if progress_date is None:
        raise ValidationError("Contribution date is required")
    if not goal.start_period <= progress_date <= goal.end_period:
        raise ValidationError(
            f"Date {progress_date} is outside the goal period "
            f"({goal.start_period} to {goal.end_period})"
        )

    description = (description or "").strip()

    if existing is not None:
        addition = description or f"{value:.2f}"
        joined = f"{existing.description} + {addition}" if existing.description else addition
        return replace(existing, value=existing.value + value, description=joined)

    return GoalContribution(
        user_id=user_id,
        goal_id=goal.id,
        value=value,
        progress_date=progress_date,
        description=description or default_contribution_description(goal),
    )
