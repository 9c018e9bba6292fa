import asyncio
from typing import Dict, List

from cashflow.domain import EXPENSE, INCOME, Transaction, as_day
from cashflow.transforms import total_balance


def _month_key(t: Transaction) -> str:
    return as_day(t.date).strftime("%Y-%m")


async def totals_by_month(trans: List[Transaction], months: List[str]) -> Dict[str, Dict[str, float]]:
    """Income, expenses and net per month, computed concurrently.

    months: list of YYYY-MM strings (e.g., '2025-01')
    """
    async def month_total(month: str) -> tuple[str, Dict[str, float]]:
        income = sum(t.amount for t in trans if t.kind == INCOME and _month_key(t) == month)
        expenses = sum(t.amount for t in trans if t.kind == EXPENSE and _month_key(t) == month)
        await asyncio.sleep(0)  # cooperate
        return month, {"income": income, "expenses": expenses, "net": income - expenses}

    results = await asyncio.gather(*(month_total(m) for m in months))
    return {k: v for k, v in results}


async def reserve_by_month(trans: List[Transaction], months: List[str]) -> Dict[str, float]:
    """Clamped closing reserve for each month (everything dated up to that month's end)."""
    async def closing(month: str) -> tuple[str, float]:
        upto = tuple(t for t in trans if _month_key(t) <= month)
        await asyncio.sleep(0)
        return month, max(0, total_balance(upto))

    results = await asyncio.gather(*(closing(m) for m in months))
    return {k: v for k, v in results}
