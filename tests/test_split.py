import pytest

from cashflow.domain import BUCKETS, AllocationSplit
from cashflow.split import DEFAULT_SPLIT, clamp_percent, rebalance, split_amounts


STARTING_SPLITS = (
    AllocationSplit(40, 30, 20, 10),
    AllocationSplit(100, 0, 0, 0),
    AllocationSplit(0, 0, 0, 100),
    AllocationSplit(25, 25, 25, 25),
    AllocationSplit(98, 1, 1, 0),
    AllocationSplit(33, 33, 33, 1),
    AllocationSplit(1, 2, 3, 94),
)


def test_rebalance_always_sums_to_100_and_never_negative():
    for start in STARTING_SPLITS:
        for key in BUCKETS:
            for value in range(0, 101):
                result = rebalance(start, key, value)
                assert result.total() == 100, (start, key, value, result)
                assert all(result.get(k) >= 0 for k in BUCKETS), (start, key, value, result)
                assert result.get(key) == value


def test_rebalance_no_change_is_identity():
    result = rebalance(DEFAULT_SPLIT, "owner_pay", 40)
    assert result == DEFAULT_SPLIT


def test_rebalance_reinvestment_to_50_shrinks_others_proportionally():
    result = rebalance(DEFAULT_SPLIT, "reinvestment", 50)
    assert result == AllocationSplit(owner_pay=29, reinvestment=50, savings=14, tax_reserve=7)
    assert result.owner_pay > result.savings > result.tax_reserve
    assert result.owner_pay < 40 and result.savings < 20 and result.tax_reserve < 10


def test_rebalance_others_all_zero_goes_to_last_bucket():
    start = AllocationSplit(owner_pay=100, reinvestment=0, savings=0, tax_reserve=0)
    result = rebalance(start, "owner_pay", 50)
    assert result == AllocationSplit(owner_pay=50, reinvestment=0, savings=0, tax_reserve=50)


def test_rebalance_others_all_zero_when_last_bucket_changed():
    start = AllocationSplit(owner_pay=0, reinvestment=0, savings=0, tax_reserve=100)
    result = rebalance(start, "tax_reserve", 70)
    assert result == AllocationSplit(owner_pay=0, reinvestment=0, savings=30, tax_reserve=70)


def test_rebalance_rounding_residual_never_goes_negative():
    start = AllocationSplit(owner_pay=98, reinvestment=1, savings=1, tax_reserve=0)
    result = rebalance(start, "owner_pay", 99)
    assert result == AllocationSplit(owner_pay=99, reinvestment=1, savings=0, tax_reserve=0)


def test_rebalance_growth_distributes_over_others():
    result = rebalance(DEFAULT_SPLIT, "owner_pay", 10)
    assert result.owner_pay == 10
    # +30 spread 30:20:10 over the others
    assert result == AllocationSplit(owner_pay=10, reinvestment=45, savings=30, tax_reserve=15)


def test_rebalance_out_of_range_still_converges():
    result = rebalance(DEFAULT_SPLIT, "savings", 150)
    assert result.total() == 100


def test_rebalance_does_not_mutate_input():
    start = AllocationSplit(40, 30, 20, 10)
    rebalance(start, "savings", 60)
    assert start == AllocationSplit(40, 30, 20, 10)


def test_rebalance_unknown_bucket():
    with pytest.raises(ValueError):
        rebalance(DEFAULT_SPLIT, "marketing", 10)


def test_clamp_percent():
    assert clamp_percent(-5) == 0
    assert clamp_percent(42) == 42
    assert clamp_percent(120) == 100


def test_split_amounts():
    amounts = split_amounts(DEFAULT_SPLIT, 1000)
    assert amounts == {"owner_pay": 400, "reinvestment": 300, "savings": 200, "tax_reserve": 100}


def test_split_amounts_negative_profit_allocates_nothing():
    amounts = split_amounts(DEFAULT_SPLIT, -250)
    assert all(v == 0 for v in amounts.values())
