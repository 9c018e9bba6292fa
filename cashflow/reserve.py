from datetime import date
from typing import Iterable, List

from loguru import logger

from cashflow.domain import ReserveSample, Transaction, as_day
from cashflow.filters import on_or_before
from cashflow.transforms import total_balance


def add_months(d: date, months: int) -> date:
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def sample_dates(now) -> List[date]:
    """Mid-month / month-start points from two months back up to ``now``.

    The series always ends exactly at ``now``.
    """
    now = as_day(now)
    two_months_ago = add_months(now.replace(day=1), -2)

    points = []
    for i in range(5):
        month_start = add_months(two_months_ago, i // 2)
        if i % 2 == 1:
            point = add_months(month_start, 1)
        else:
            point = month_start.replace(day=15)
        points.append(min(point, now))

    if points[-1] != now:
        points.append(now)
    return points


def current_reserve(
    transactions: Iterable[Transaction], now=None, include_future: bool = True
) -> float:
    """Clamped running total; ``include_future=False`` drops rows dated after ``now``."""
    trans = tuple(transactions)
    if now is not None and not include_future:
        return max(0, total_balance(trans, until=as_day(now)))
    return max(0, total_balance(trans))


def sample(
    transactions: Iterable[Transaction], now, include_future: bool = False
) -> List[ReserveSample]:
    now = as_day(now)
    ordered = sorted(transactions, key=lambda t: as_day(t.date))

    samples = []
    for d in sample_dates(now):
        upto = tuple(filter(on_or_before(d), ordered))
        samples.append(ReserveSample(date=d, balance=max(0, total_balance(upto))))

    if not samples:
        samples.append(ReserveSample(date=now, balance=0))

    final = current_reserve(ordered, now=now, include_future=include_future)
    samples[-1] = ReserveSample(date=samples[-1].date, balance=final)

    logger.debug("sampled {} reserve points from {} transactions", len(samples), len(ordered))
    return samples


def sample_as_points(samples: Iterable[ReserveSample]) -> List[dict]:
    """Chart payload: ``[{"date": "YYYY-MM-DD", "amount": ...}]``."""
    return [{"date": s.date.isoformat(), "amount": s.balance} for s in samples]
