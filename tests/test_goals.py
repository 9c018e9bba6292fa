from datetime import date

from cashflow.domain import EXPENSE, INCOME, GrowthGoal, Transaction
from cashflow.goals import add_cash, days_until, months_to_goal, progress_percentage
from cashflow.memo import average_monthly_profit


def make_goal(current=0, target=1000, completed=False):
    return GrowthGoal("g1", "Emergency fund", target, current, date(2024, 6, 30), completed)


def test_add_cash_accumulates():
    result = add_cash(make_goal(current=200), 300)
    assert result.is_right()
    goal = result.get_or_else(None)
    assert goal.current_amount == 500
    assert goal.is_completed is False


def test_add_cash_completes_goal():
    goal = add_cash(make_goal(current=900), 100).get_or_else(None)
    assert goal.current_amount == 1000
    assert goal.is_completed is True


def test_add_cash_rejects_non_positive():
    for amount in (0, -5, "10", True):
        result = add_cash(make_goal(), amount)
        assert result.is_left()
        assert result.get_error()["error"] == "invalid_amount"


def test_add_cash_leaves_original_untouched():
    goal = make_goal(current=100)
    add_cash(goal, 50)
    assert goal.current_amount == 100


def test_progress_percentage_capped():
    assert progress_percentage(make_goal(current=250)) == 25
    assert progress_percentage(make_goal(current=5000)) == 100
    assert progress_percentage(make_goal(current=10, target=0)) == 0


def test_days_until():
    assert days_until(date(2024, 6, 30), date(2024, 6, 20)) == 10
    assert days_until("2024-06-01", date(2024, 6, 20)) == -19


def test_months_to_goal():
    trans = (
        Transaction("t1", 800, INCOME, date(2024, 1, 3)),
        Transaction("t2", 300, EXPENSE, date(2024, 1, 9)),
        Transaction("t3", 700, INCOME, date(2024, 2, 3)),
        Transaction("t4", 200, EXPENSE, date(2024, 2, 9)),
    )
    # 900 left; 500 a month over two months, 1000/3 over three
    assert months_to_goal(make_goal(current=100), trans, months=2) == 2
    assert months_to_goal(make_goal(current=100), trans) == 3
    assert months_to_goal(make_goal(current=1000), trans) == 0


def test_months_to_goal_without_profit():
    trans = (Transaction("t1", 300, EXPENSE, date(2024, 1, 9)),)
    assert months_to_goal(make_goal(), trans) is None
    assert months_to_goal(make_goal(), ()) is None


def test_average_monthly_profit_uses_last_months():
    trans = (
        Transaction("t1", 100, INCOME, date(2024, 1, 1)),
        Transaction("t2", 200, INCOME, date(2024, 2, 1)),
        Transaction("t3", 400, INCOME, date(2024, 3, 1)),
    )
    assert average_monthly_profit(trans, 2) == 300
    assert average_monthly_profit(trans, 3) == 700 / 3
    assert average_monthly_profit((), 3) == 0


def test_average_monthly_profit_is_cached():
    trans = tuple(Transaction(str(i), 10, INCOME, date(2024, 1, 1)) for i in range(100))
    average_monthly_profit.cache_clear()
    average_monthly_profit(trans, 1)
    average_monthly_profit(trans, 1)
    info = average_monthly_profit.cache_info()
    assert info.hits == 1
    assert info.misses == 1


def test_average_monthly_profit_counts_quiet_months_as_zero():
    trans = (
        Transaction("t1", 300, INCOME, date(2023, 1, 10)),
        Transaction("t2", 300, INCOME, date(2023, 3, 10)),
    )
    assert average_monthly_profit(trans, 3) == 200
    # window ends at March, so January falls outside two months
    assert average_monthly_profit(trans, 2) == 150


def test_average_monthly_profit_window_crosses_year():
    trans = (
        Transaction("t1", 600, INCOME, date(2023, 12, 1)),
        Transaction("t2", 100, EXPENSE, date(2024, 1, 15)),
    )
    assert average_monthly_profit(trans, 2) == 250
    assert average_monthly_profit(trans, 0) == 0


def test_average_monthly_profit_cache_is_bounded():
    assert average_monthly_profit.cache_info().maxsize == 128
