from collections import defaultdict
from functools import lru_cache

from cashflow.domain import Transaction, as_day
from cashflow.transforms import signed_amount


@lru_cache(maxsize=128)
def average_monthly_profit(transactions: tuple[Transaction, ...], months: int) -> float:
    """Average net (income minus expenses) over the last ``months`` calendar months.

    The window ends at the latest month that has a transaction. Months without
    activity inside the window count as zero, so the sum is always divided by
    ``months``.
    """
    if not transactions or months <= 0:
        return 0.0

    monthly = defaultdict(float)
    for t in transactions:
        d = as_day(t.date)
        monthly[d.year * 12 + d.month - 1] += signed_amount(t)

    last = max(monthly)
    window = range(last - months + 1, last + 1)
    return sum(monthly.get(m, 0.0) for m in window) / months
