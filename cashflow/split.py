import math
from typing import Dict

from loguru import logger

from cashflow.domain import BUCKETS, AllocationSplit

DEFAULT_SPLIT = AllocationSplit(owner_pay=40, reinvestment=30, savings=20, tax_reserve=10)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def clamp_percent(value) -> int:
    return max(0, min(100, int(value)))


def rebalance(current: AllocationSplit, changed_key: str, new_value: int) -> AllocationSplit:
    """Set one bucket and redistribute the difference over the other three.

    The other buckets move in proportion to their values in ``current``, so
    the result always sums to 100. When the other three are all zero the whole
    difference lands on the last of them (in ``BUCKETS`` order).
    """
    working = current.with_value(changed_key, new_value).as_dict()
    total = sum(working.values())
    if total == 100:
        return AllocationSplit(**working)

    diff = 100 - total
    others = [k for k in BUCKETS if k != changed_key]
    others_sum = sum(current.get(k) for k in others)
    last = others[-1]

    if others_sum == 0:
        working[last] = max(0, working[last] + diff)
    else:
        for key in others:
            value = current.get(key)
            proportion = value / others_sum
            working[key] = max(0, _round_half_up(value + diff * proportion))

    residual = 100 - sum(working.values())
    if residual:
        working[last] += residual
        # rounding two .5 shares up can leave the last bucket short; spill backwards
        for i in range(len(others) - 1, 0, -1):
            if working[others[i]] >= 0:
                break
            working[others[i - 1]] += working[others[i]]
            working[others[i]] = 0

    logger.debug("rebalanced {} -> {}: {}", changed_key, new_value, working)
    return AllocationSplit(**working)


def split_amounts(split: AllocationSplit, profit: float) -> Dict[str, float]:
    base = max(0.0, float(profit))
    return {k: round(base * split.get(k) / 100, 2) for k in BUCKETS}
