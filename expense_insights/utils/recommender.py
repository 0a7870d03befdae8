"""
Rule based spending recommendations and the structured insights summary.

Both entry points recompute everything from the expenses they are given; there
is no state between calls.
"""
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from expense_insights.models.expense import Expense, ExpenseLike, parse_expenses
from expense_insights.models.insights import (
    ChangeDirection,
    MonthChange,
    MonthlyAggregate,
    SpendingInsights,
)
from expense_insights.utils.predictor import group_expenses_by_month

NEAR_LIMIT_PERCENTAGE = 80.0
DOMINANT_CATEGORY_PERCENTAGE = 50.0
SIGNIFICANT_CHANGE_PERCENTAGE = 5.0

NOT_ENOUGH_DATA = "Not enough data for recommendations."
WELL_UNDER_BUDGET = "Great job! You are well under your budget."
ON_TRACK = "You are on track with your spending."


def round_half_up(value: float, places: int = 0) -> Decimal:
    """Round with ties away from zero, as the UI's number formatting does."""
    return Decimal(str(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _format_percentage(value: float) -> str:
    # One decimal at most, without a trailing ".0"
    text = f"{round_half_up(value, 1)}"
    return text[:-2] if text.endswith(".0") else text


def group_expenses_by_category(expenses: Iterable[Expense]) -> Dict[str, float]:
    totals: Dict[str, float] = defaultdict(float)
    for exp in expenses:
        totals[exp.category] += exp.amount
    return dict(totals)


def get_top_category(category_totals: Dict[str, float]) -> Optional[str]:
    """Category with the strictly greatest positive total; earlier entries win ties."""
    top, top_total = None, 0.0
    for category, total in category_totals.items():
        if total > top_total:
            top, top_total = category, total
    return top


def calculate_month_over_month_change(monthly: List[MonthlyAggregate]) -> MonthChange:
    if len(monthly) < 2:
        return MonthChange()

    previous, latest = monthly[-2].total, monthly[-1].total
    if previous == 0:
        # No baseline to compare against; report the direction only
        direction = ChangeDirection.INCREASE if latest > 0 else ChangeDirection.STABLE
        return MonthChange(percentage=0.0, direction=direction, has_change=False)

    change = (latest - previous) / previous * 100
    if change > 0:
        direction = ChangeDirection.INCREASE
    elif change < 0:
        direction = ChangeDirection.DECREASE
    else:
        direction = ChangeDirection.STABLE

    return MonthChange(
        percentage=float(round_half_up(abs(change), 1)),
        direction=direction,
        has_change=abs(change) > SIGNIFICANT_CHANGE_PERCENTAGE,
    )


def _budget_recommendation(total_spent: float, limit: float, top_category: Optional[str]) -> Optional[str]:
    if total_spent > limit:
        over_budget = total_spent - limit
        if top_category:
            return f"You are over budget by ${round_half_up(over_budget, 2)}. Consider cutting back on {top_category}."
        return f"You are over budget by ${round_half_up(over_budget, 2)}. Consider reducing your spending."

    budget_percentage = total_spent / limit * 100
    if budget_percentage >= NEAR_LIMIT_PERCENTAGE:
        if top_category:
            return f"You are close to your budget ({round_half_up(budget_percentage)}%). Be careful with {top_category}."
        return f"You are close to your budget ({round_half_up(budget_percentage)}%). Consider monitoring your spending."
    return None


def generate_recommendations(expenses: Optional[Iterable[ExpenseLike]], limit: Optional[float] = 0) -> List[str]:
    records = parse_expenses(expenses)
    limit = limit or 0
    if not records:
        return [NOT_ENOUGH_DATA]

    category_totals = group_expenses_by_category(records)
    monthly = group_expenses_by_month(records)
    total_spent = sum(exp.amount for exp in records)
    top_category = get_top_category(category_totals)

    recommendations: List[str] = []

    if limit > 0:
        budget_message = _budget_recommendation(total_spent, limit, top_category)
        if budget_message:
            recommendations.append(budget_message)

    if top_category:
        share = category_totals[top_category] / total_spent * 100
        if share > DOMINANT_CATEGORY_PERCENTAGE:
            recommendations.append(
                f"Most of your spending is in {top_category} ({round_half_up(share)}%). Consider balancing your budget."
            )

    month_change = calculate_month_over_month_change(monthly)
    if month_change.has_change:
        change_text = "increased" if month_change.direction == ChangeDirection.INCREASE else "decreased"
        recommendations.append(
            f"Your spending {change_text} by {_format_percentage(month_change.percentage)}% compared to last month."
        )

    if not recommendations:
        if limit > 0 and total_spent < limit * NEAR_LIMIT_PERCENTAGE / 100:
            recommendations.append(WELL_UNDER_BUDGET)
        else:
            recommendations.append(ON_TRACK)

    return recommendations


def get_spending_insights(expenses: Optional[Iterable[ExpenseLike]], limit: Optional[float] = 0) -> SpendingInsights:
    records = parse_expenses(expenses)
    limit = limit or 0
    if not records:
        return SpendingInsights()

    category_totals = group_expenses_by_category(records)
    total_spent = sum(exp.amount for exp in records)

    return SpendingInsights(
        total_spent=total_spent,
        category_totals=category_totals,
        top_category=get_top_category(category_totals),
        budget_percentage=total_spent / limit * 100 if limit > 0 else 0.0,
        is_over_budget=limit > 0 and total_spent > limit,
        month_over_month_change=calculate_month_over_month_change(group_expenses_by_month(records)),
    )
