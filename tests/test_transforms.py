from datetime import date

from cashflow.domain import EXPENSE, INCOME, AllocationSplit, Transaction
from cashflow.transforms import (
    add_transaction,
    expense_transactions,
    income_transactions,
    load_seed,
    monthly_summary,
    recent_transactions,
    remove_transaction,
    signed_amount,
    total_balance,
    update_transaction,
)


def make_sample():
    return (
        Transaction("t1", 1000, INCOME, date(2023, 1, 5), "Retainer", "Sales"),
        Transaction("t2", 200, EXPENSE, date(2023, 1, 10), "Rent", "Rent"),
        Transaction("t3", 500, INCOME, date(2023, 3, 2), "Project", "Sales"),
        Transaction("t4", 100, EXPENSE, date(2023, 3, 5), "Ads", "Marketing"),
    )


def test_add_transaction_immutability():
    trans = make_sample()
    t5 = Transaction("t5", 50, EXPENSE, date(2023, 3, 6), "Coffee")
    new_trans = add_transaction(trans, t5)

    assert new_trans is not trans
    assert len(new_trans) == 5
    assert len(trans) == 4


def test_update_transaction():
    trans = make_sample()
    updated = update_transaction(trans, "t2", amount=250)

    assert updated[1].amount == 250
    assert trans[1].amount == 200
    assert updated[0] is trans[0]


def test_remove_transaction():
    trans = make_sample()
    remaining = remove_transaction(trans, "t1")
    assert [t.id for t in remaining] == ["t2", "t3", "t4"]
    assert remove_transaction(trans, "missing") == trans


def test_signed_amount_uses_kind():
    income, expense = make_sample()[:2]
    assert signed_amount(income) == 1000
    assert signed_amount(expense) == -200


def test_total_balance():
    trans = make_sample()
    assert total_balance(trans) == 1200
    assert total_balance(trans, until=date(2023, 1, 31)) == 800
    assert total_balance(()) == 0


def test_income_and_expense_filters():
    trans = make_sample()
    assert {t.id for t in income_transactions(trans)} == {"t1", "t3"}
    assert {t.id for t in expense_transactions(trans)} == {"t2", "t4"}


def test_monthly_summary_current_month_only():
    summary = monthly_summary(make_sample(), date(2023, 3, 10))
    assert summary.revenue == 500
    assert summary.expenses == 100
    assert summary.profit == 400


def test_monthly_summary_counts_rows_after_month_start():
    summary = monthly_summary(make_sample(), date(2023, 2, 10))
    # everything dated on or after the 1st counts, later months included
    assert summary.revenue == 500
    assert summary.profit == 400
    assert monthly_summary((), date(2023, 2, 10)).profit == 0


def test_recent_transactions_newest_first():
    recent = recent_transactions(make_sample(), limit=2)
    assert [t.id for t in recent] == ["t4", "t3"]


def test_load_seed():
    transactions, split, goals = load_seed("data/seed.json")

    assert len(transactions) >= 5
    assert all(isinstance(t.date, date) for t in transactions)
    assert split == AllocationSplit(40, 30, 20, 10)
    assert len(goals) >= 1
