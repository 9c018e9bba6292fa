from dataclasses import asdict, dataclass, replace
from datetime import date, datetime
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
KINDS = (INCOME, EXPENSE)

# fixed iteration order, rebalancing depends on it
BUCKETS = ("owner_pay", "reinvestment", "savings", "tax_reserve")


def as_day(value) -> date:
    """Truncate a datetime (or ISO string) to a calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float    # magnitude, never negative
    kind: str        # "income" or "expense"
    date: date
    description: str = ""
    category: str = ""


@dataclass(frozen=True)
class AllocationSplit:
    owner_pay: int = 40
    reinvestment: int = 30
    savings: int = 20
    tax_reserve: int = 10

    def get(self, key: str) -> int:
        if key not in BUCKETS:
            raise ValueError(f"unknown bucket: {key}")
        return getattr(self, key)

    def with_value(self, key: str, value: int) -> "AllocationSplit":
        if key not in BUCKETS:
            raise ValueError(f"unknown bucket: {key}")
        return replace(self, **{key: value})

    def total(self) -> int:
        return sum(getattr(self, k) for k in BUCKETS)

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ReserveSample:
    date: date
    balance: float  # clamped at 0 for display


@dataclass(frozen=True)
class GrowthGoal:
    id: str
    name: str
    target_amount: float
    current_amount: float = 0
    target_date: Optional[date] = None
    is_completed: bool = False


@dataclass(frozen=True)
class MonthlySummary:
    revenue: float
    expenses: float
    profit: float


@dataclass(frozen=True)
class Report:
    id: str
    name: str
    type: str
    period: str
    created_at: str
    url: str


@dataclass(frozen=True)
class Notification:
    id: str
    title: str
    message: str
    type: str = "announcement"     # announcement, maintenance, alert
    target_user_ids: str = "all"   # comma separated ids or "all"
    sent_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_active: bool = True


@dataclass(frozen=True)
class SupportTicket:
    id: str
    user_id: str
    subject: str
    message: str
    status: str = "open"
    priority: str = "medium"
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class BusinessProfile:
    business_name: str = ""
    industry: str = ""
    monthly_revenue: str = ""


@dataclass(frozen=True)
class Onboarding:
    step: int = 1
    completed: bool = False
    financial_goals: tuple[str, ...] = ()
    bank_connected: bool = False
