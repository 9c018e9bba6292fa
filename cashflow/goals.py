import math
from dataclasses import replace
from typing import Optional

from loguru import logger

from cashflow.domain import GrowthGoal, Transaction, as_day
from cashflow.functional import Either, Left, Right
from cashflow.memo import average_monthly_profit


def add_cash(goal: GrowthGoal, amount) -> Either[dict, GrowthGoal]:
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount <= 0:
        return Left({
            "error": "invalid_amount",
            "message": "Amount to add must be a positive number",
            "amount": amount,
        })

    new_amount = goal.current_amount + amount
    updated = replace(
        goal,
        current_amount=new_amount,
        is_completed=new_amount >= goal.target_amount,
    )
    if updated.is_completed and not goal.is_completed:
        logger.info("goal {} reached {}", goal.name, goal.target_amount)
    return Right(updated)


def progress_percentage(goal: GrowthGoal) -> float:
    if goal.target_amount == 0:
        return 0.0
    return min(goal.current_amount / goal.target_amount * 100, 100.0)


def days_until(target_date, today) -> int:
    return (as_day(target_date) - as_day(today)).days


def months_to_goal(
    goal: GrowthGoal, transactions: tuple[Transaction, ...], months: int = 3
) -> Optional[int]:
    """Months of average profit needed to close the gap, None if profit is not positive."""
    remaining = goal.target_amount - goal.current_amount
    if remaining <= 0:
        return 0
    monthly = average_monthly_profit(tuple(transactions), months)
    if monthly <= 0:
        return None
    return math.ceil(remaining / monthly)
