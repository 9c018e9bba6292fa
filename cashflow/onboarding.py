"""Guided setup: welcome, business profile, financial goals, bank, profit split.

Every step returns a new ``Onboarding`` (and profile / split where relevant)
wrapped in ``Right``; bad input comes back as a ``Left`` error dict and the
current state is left as it was.
"""
from dataclasses import replace
from typing import Iterable, Tuple

from loguru import logger

from cashflow.domain import AllocationSplit, BusinessProfile, Onboarding
from cashflow.functional import Either, Left, Right, validate_split

LAST_STEP = 5
MAX_FINANCIAL_GOALS = 3

FINANCIAL_GOALS = {
    "stability": "Increase business stability",
    "growth": "Grow revenue aggressively",
    "major-purchase": "Save for a major purchase",
    "owner-pay": "Increase owner pay",
    "reduce-debt": "Reduce business debt",
}

INDUSTRIES = {
    "retail": "Retail",
    "services": "Professional Services",
    "tech": "Technology",
    "food": "Food & Beverage",
    "health": "Health & Wellness",
    "creative": "Creative & Design",
    "other": "Other",
}

REVENUE_RANGES = {
    "range1": "Less than $1,000",
    "range2": "$1,000 - $5,000",
    "range3": "$5,000 - $10,000",
    "range4": "$10,000 - $25,000",
    "range5": "$25,000 - $50,000",
    "range6": "More than $50,000",
}


def _advance(state: Onboarding, finished_step: int) -> Onboarding:
    # revisiting an earlier step never moves the user backwards
    return replace(state, step=min(LAST_STEP, max(state.step, finished_step + 1)))


def start(state: Onboarding) -> Onboarding:
    return _advance(state, 1)


def update_profile(
    profile: BusinessProfile, business_name: str, industry: str, monthly_revenue: str
) -> Either[dict, BusinessProfile]:
    if not (business_name or "").strip():
        return Left({
            "error": "missing_field",
            "message": "Business name is required",
            "fields": ["business_name"],
        })
    if industry not in INDUSTRIES:
        return Left({
            "error": "invalid_industry",
            "message": f"Industry must be one of {', '.join(INDUSTRIES)}",
            "industry": industry,
        })
    if monthly_revenue not in REVENUE_RANGES:
        return Left({
            "error": "invalid_revenue_range",
            "message": f"Monthly revenue must be one of {', '.join(REVENUE_RANGES)}",
            "monthly_revenue": monthly_revenue,
        })
    return Right(replace(
        profile,
        business_name=business_name.strip(),
        industry=industry,
        monthly_revenue=monthly_revenue,
    ))


def submit_business_info(
    state: Onboarding, profile: BusinessProfile, business_name: str, industry: str, monthly_revenue: str
) -> Either[dict, Tuple[Onboarding, BusinessProfile]]:
    return update_profile(profile, business_name, industry, monthly_revenue).map(
        lambda p: (_advance(state, 2), p)
    )


def toggle_goal(selected: Tuple[str, ...], goal_id: str) -> Tuple[str, ...]:
    """Add or remove a goal; additions past the limit are ignored."""
    if goal_id in selected:
        return tuple(g for g in selected if g != goal_id)
    if len(selected) >= MAX_FINANCIAL_GOALS:
        return selected
    return selected + (goal_id,)


def select_goals(state: Onboarding, goal_ids: Iterable[str]) -> Either[dict, Onboarding]:
    chosen = tuple(dict.fromkeys(goal_ids))

    unknown = [g for g in chosen if g not in FINANCIAL_GOALS]
    if unknown:
        return Left({
            "error": "unknown_goal",
            "message": f"Unknown financial goals: {', '.join(unknown)}",
            "goals": unknown,
        })
    if not chosen or len(chosen) > MAX_FINANCIAL_GOALS:
        return Left({
            "error": "goal_count",
            "message": f"Pick between 1 and {MAX_FINANCIAL_GOALS} financial goals",
            "count": len(chosen),
        })
    return Right(replace(_advance(state, 3), financial_goals=chosen))


def connect_bank(state: Onboarding, connected: bool) -> Onboarding:
    """Step 4 can be skipped, which records ``connected=False``."""
    return replace(_advance(state, 4), bank_connected=bool(connected))


def complete(
    state: Onboarding, split: AllocationSplit
) -> Either[dict, Tuple[Onboarding, AllocationSplit]]:
    checked = validate_split(split)
    if checked.is_left():
        logger.warning("onboarding split rejected: {}", checked.get_error())
        return checked

    logger.info("onboarding completed with split {}", split.as_dict())
    return Right((replace(state, step=LAST_STEP, completed=True), split))
