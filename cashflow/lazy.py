from collections import defaultdict
from datetime import date
from typing import Callable, Iterable, Iterator, Optional, Tuple

from cashflow.domain import EXPENSE, Transaction
from cashflow.filters import by_amount_range, by_category, by_date_range, by_kind


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterable[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def lazy_top_categories(trans: Iterable[Transaction], k: int) -> Iterator[tuple[str, float]]:
    totals_by_category: dict[str, float] = defaultdict(float)

    for t in trans:
        if t.kind == EXPENSE:
            totals_by_category[t.category or "Uncategorized"] += t.amount

    ordered: list[Tuple[str, float]] = sorted(
        totals_by_category.items(),
        key=lambda item: item[1],
        reverse=True,
    )

    for name, total in ordered[: max(0, k)]:
        yield name, total


def search_transactions(
    trans: Iterable[Transaction],
    kind: Optional[str] = None,
    category: Optional[str] = None,
    start=None,
    end=None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
) -> Iterator[Transaction]:
    """Lazily yield transactions matching every criterion that is set."""
    preds: list[Callable[[Transaction], bool]] = []
    if kind:
        preds.append(by_kind(kind))
    if category:
        preds.append(by_category(category))
    if start is not None or end is not None:
        preds.append(by_date_range(start or date.min, end or date.max))
    if min_amount is not None or max_amount is not None:
        preds.append(by_amount_range(
            0 if min_amount is None else min_amount,
            float("inf") if max_amount is None else max_amount,
        ))

    yield from iter_transactions(trans, lambda t: all(p(t) for p in preds))
