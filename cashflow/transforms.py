import json
from dataclasses import replace
from functools import reduce
from typing import Optional, Tuple

from cashflow.domain import (
    EXPENSE,
    INCOME,
    AllocationSplit,
    GrowthGoal,
    MonthlySummary,
    Transaction,
    as_day,
)


def load_seed(
    path: str,
) -> Tuple[
    Tuple[Transaction, ...],
    AllocationSplit,
    Tuple[GrowthGoal, ...],
]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    transactions = tuple(
        Transaction(**{**t, "date": as_day(t["date"])}) for t in data["transactions"]
    )
    split = AllocationSplit(**data.get("profit_split", {}))
    goals = tuple(
        GrowthGoal(
            **{
                **g,
                "target_date": as_day(g["target_date"]) if g.get("target_date") else None,
            }
        )
        for g in data.get("growth_goals", [])
    )

    return transactions, split, goals


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return trans + (t,)


def update_transaction(
    trans: Tuple[Transaction, ...], tid: str, **changes
) -> Tuple[Transaction, ...]:
    return tuple(
        replace(t, **changes) if t.id == tid else t for t in trans
    )


def remove_transaction(
    trans: Tuple[Transaction, ...], tid: str
) -> Tuple[Transaction, ...]:
    return tuple(t for t in trans if t.id != tid)


def signed_amount(t: Transaction) -> float:
    if t.kind == INCOME:
        return t.amount
    if t.kind == EXPENSE:
        return -t.amount
    return 0


def total_balance(trans: Tuple[Transaction, ...], until=None) -> float:
    """Signed sum of all transactions, optionally only those dated <= ``until``."""
    day = as_day(until) if until is not None else None
    return reduce(
        lambda acc, t: acc + signed_amount(t)
        if day is None or as_day(t.date) <= day
        else acc,
        trans,
        0,
    )


def income_transactions(trans: Tuple[Transaction, ...]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.kind == INCOME, trans))


def expense_transactions(trans: Tuple[Transaction, ...]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.kind == EXPENSE, trans))



def monthly_summary(trans: Tuple[Transaction, ...], now) -> MonthlySummary:
    first_day = as_day(now).replace(day=1)
    current = tuple(t for t in trans if as_day(t.date) >= first_day)

    revenue = sum(t.amount for t in income_transactions(current))
    expenses = sum(t.amount for t in expense_transactions(current))
    return MonthlySummary(revenue=revenue, expenses=expenses, profit=revenue - expenses)


def recent_transactions(
    trans: Tuple[Transaction, ...], limit: Optional[int] = 5
) -> Tuple[Transaction, ...]:
    ordered = sorted(trans, key=lambda t: as_day(t.date), reverse=True)
    return tuple(ordered[:limit])
