from datetime import date

from cashflow.domain import Transaction, as_day


def by_kind(kind: str):
    def _filter(t: Transaction) -> bool:
        return t.kind == kind

    return _filter


def by_category(category: str):
    def _filter(t: Transaction) -> bool:
        return t.category == category

    return _filter


def by_date_range(start, end):
    start, end = as_day(start), as_day(end)

    def _filter(t: Transaction) -> bool:
        return start <= as_day(t.date) <= end

    return _filter


def on_or_before(day: date):
    day = as_day(day)

    def _filter(t: Transaction) -> bool:
        return as_day(t.date) <= day

    return _filter


def by_amount_range(min: float, max: float):
    def _filter(t: Transaction) -> bool:
        return min <= t.amount <= max

    return _filter
