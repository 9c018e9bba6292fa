import asyncio
import inspect
import re
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple
from uuid import uuid4

from loguru import logger

from cashflow.async_reports import reserve_by_month, totals_by_month
from cashflow.config import get_settings
from cashflow.domain import EXPENSE, INCOME, AllocationSplit, GrowthGoal, Report, Transaction, as_day
from cashflow.events import RESERVE_ALERT, SPLIT_UPDATED, EventBus, event_bus
from cashflow.filters import by_date_range, by_kind
from cashflow.functional import Either, Left, Right, validate_split
from cashflow.goals import progress_percentage
from cashflow.lazy import iter_transactions
from cashflow.reserve import add_months, current_reserve, sample, sample_as_points
from cashflow.split import DEFAULT_SPLIT, clamp_percent, rebalance, split_amounts
from cashflow.transforms import monthly_summary, recent_transactions


def _transaction_row(t: Transaction) -> Dict[str, Any]:
    return {
        "id": t.id,
        "description": t.description,
        "amount": t.amount,
        "kind": t.kind,
        "category": t.category,
        "date": as_day(t.date).isoformat(),
    }


def _goal_row(g: GrowthGoal) -> Dict[str, Any]:
    return {
        "id": g.id,
        "name": g.name,
        "target_amount": g.target_amount,
        "current_amount": g.current_amount,
        "target_date": g.target_date.isoformat() if g.target_date else None,
        "is_completed": g.is_completed,
        "progress": progress_percentage(g),
    }


class DashboardService:
    """Builds the dashboard summary: KPIs, reserve chart points, split and goals."""

    def __init__(self, bus: EventBus = event_bus, settings=None):
        self.bus = bus
        self.settings = settings or get_settings()

    def summary(
        self,
        transactions: Iterable[Transaction],
        split: Optional[AllocationSplit],
        goals: Iterable[GrowthGoal],
        now,
    ) -> Dict[str, Any]:
        trans = tuple(transactions)
        split = split or DEFAULT_SPLIT
        include_future = self.settings.INCLUDE_FUTURE_TRANSACTIONS

        month = monthly_summary(trans, now)
        cash_reserve = current_reserve(trans, now=now, include_future=include_future)
        samples = sample(trans, now, include_future=include_future)

        suggestions = [
            r
            for r in self.bus.publish(
                RESERVE_ALERT,
                {"cash_reserve": cash_reserve, "threshold": self.settings.RESERVE_ALERT_THRESHOLD},
            )
            if r.get("text")
        ]

        logger.debug(
            "dashboard summary: {} transactions, reserve {}", len(trans), cash_reserve
        )
        return {
            "summary": {
                "revenue": month.revenue,
                "expenses": month.expenses,
                "profit": month.profit,
                "cash_reserve": cash_reserve,
            },
            "cash_reserve_data": sample_as_points(samples),
            "profit_split": split.as_dict(),
            "split_amounts": split_amounts(split, month.profit),
            "recent_transactions": [
                _transaction_row(t)
                for t in recent_transactions(trans, self.settings.RECENT_TRANSACTIONS_LIMIT)
            ],
            "growth_goals": [_goal_row(g) for g in tuple(goals)[:3]],
            "suggestions": suggestions,
        }


class SplitService:
    """Applies a single slider change and returns a split that is safe to persist."""

    def __init__(self, bus: EventBus = event_bus):
        self.bus = bus

    def update(
        self, current: AllocationSplit, changed_key: str, new_value
    ) -> Either[dict, Dict[str, Any]]:
        checked = validate_split(current)
        if checked.is_left():
            logger.warning("rejecting rebalance from invalid split: {}", checked.get_error())
            return checked

        result = rebalance(current, changed_key, clamp_percent(new_value))
        stable = validate_split(result)
        if stable.is_left():
            return stable

        tips = [r for r in self.bus.publish(SPLIT_UPDATED, {"split": result.as_dict()}) if r]
        logger.info("profit split updated: {}", result.as_dict())
        return Right({"split": result, "suggestions": tips})


def _slug(text: str) -> str:
    return re.sub(r"\s+", "-", text.strip().lower())


def _period_range(period: str) -> Optional[Tuple[date, date]]:
    """First and last day covered by ``2023``, ``2023-03`` or ``March 2023``."""
    period = period.strip()
    if re.fullmatch(r"\d{4}", period):
        start, months = date(int(period), 1, 1), 12
    else:
        try:
            if re.fullmatch(r"\d{4}-\d{2}", period):
                start = datetime.strptime(period, "%Y-%m").date()
            else:
                start = datetime.strptime(period, "%B %Y").date()
        except ValueError:
            return None
        months = 1
    return start, add_months(start, months) - timedelta(days=1)


def profit_and_loss(trans, ledger, goals, acc: dict) -> Dict[str, Any]:
    revenue = sum(t.amount for t in filter(by_kind(INCOME), trans))
    expenses = sum(t.amount for t in filter(by_kind(EXPENSE), trans))
    return {"revenue": revenue, "expenses": expenses, "profit": revenue - expenses}


async def cash_flow(trans, ledger, goals, acc: dict) -> Dict[str, Any]:
    months = sorted({as_day(t.date).strftime("%Y-%m") for t in trans})
    by_month, closing = await asyncio.gather(
        totals_by_month(list(trans), months),
        reserve_by_month(list(ledger), months),
    )
    return {
        "months": by_month,
        "closing_reserve": closing,
        "net": sum(m["net"] for m in by_month.values()),
    }


def growth_analysis(trans, ledger, goals, acc: dict) -> Dict[str, Any]:
    rows = [_goal_row(g) for g in goals]
    return {
        "goals": rows,
        "completed": sum(1 for g in goals if g.is_completed),
        "saved": sum(g.current_amount for g in goals),
    }


REPORT_TYPES: Dict[str, Sequence[Callable[..., Any]]] = {
    "Profit & Loss": (profit_and_loss,),
    "Cash Flow": (profit_and_loss, cash_flow),
    "Growth Analysis": (profit_and_loss, growth_analysis),
}


class ReportService:
    """Generates a report for a period by running the aggregators for its type in order.

    Aggregators take ``(in_period, ledger, goals, acc)`` and may be plain
    functions or coroutines. ``generate`` drives the coroutines with
    ``asyncio.run`` and so cannot be called from a running event loop; await
    ``generate_async`` there instead.
    """

    def __init__(self, report_types: Optional[Dict[str, Sequence[Callable[..., Any]]]] = None):
        self.report_types = report_types or REPORT_TYPES

    def generate(
        self,
        report_type: str,
        period: str,
        transactions: Iterable[Transaction],
        goals: Iterable[GrowthGoal] = (),
        now=None,
    ) -> Either[dict, Dict[str, Any]]:
        return asyncio.run(self.generate_async(report_type, period, transactions, goals, now))

    async def generate_async(
        self,
        report_type: str,
        period: str,
        transactions: Iterable[Transaction],
        goals: Iterable[GrowthGoal] = (),
        now=None,
    ) -> Either[dict, Dict[str, Any]]:
        if not report_type or not period:
            return Left({
                "error": "missing_field",
                "message": "Report type and period are required",
            })
        if report_type not in self.report_types:
            return Left({
                "error": "unknown_report_type",
                "message": f"Unknown report type {report_type}",
                "report_type": report_type,
            })
        window = _period_range(period)
        if window is None:
            return Left({
                "error": "invalid_period",
                "message": "Period must look like 2023-03, 2023 or March 2023",
                "period": period,
            })

        ledger = tuple(transactions)
        in_period = tuple(iter_transactions(ledger, by_date_range(*window)))
        goals = tuple(goals)

        report = {"steps": [], "result": {}}
        acc: Dict[str, Any] = {}
        for agg in self.report_types[report_type]:
            out = agg(in_period, ledger, goals, acc)
            if inspect.isawaitable(out):
                out = await out
            report["steps"].append({"aggregator": getattr(agg, "__name__", str(agg)), "output": out})
            acc.update(out)
        report["result"] = acc

        created = now or datetime.now()
        report["report"] = Report(
            id=uuid4().hex[:8],
            name=f"{period} {report_type}",
            type=report_type,
            period=period,
            created_at=created.isoformat(),
            url=f"/reports/{_slug(report_type)}-{_slug(period)}.pdf",
        )
        logger.info("generated report {} ({} transactions)", report["report"].name, len(in_period))
        return Right(report)
