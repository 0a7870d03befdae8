from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from expense_insights.models.expense import Expense, ExpenseLike, parse_expenses
from expense_insights.models.insights import BudgetState, BudgetStatus
from expense_insights.utils.predictor import get_next_month_string, predict_next_month, trend_direction
from expense_insights.utils.recommender import (
    NEAR_LIMIT_PERCENTAGE,
    generate_recommendations,
    get_spending_insights,
    group_expenses_by_category,
    round_half_up,
)

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass
class CategoryShare:
    """Represents one category's slice of total spending."""

    category: str
    total: float
    percentage: float
    transaction_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class WeekdayTotal:
    day: str
    amount: float
    count: int
    average: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


class SpendingAnalyzer:
    """
    Dashboard analytics on top of the forecaster and recommender, shared by
    the API routes so every chart is computed the same way.
    """

    def __init__(
        self,
        trend_months: int = 6,
        top_category_count: int = 3,
        stable_slope_band: float = 10.0,
    ) -> None:
        self._trend_months = trend_months
        self._top_category_count = top_category_count
        self._stable_slope_band = stable_slope_band

    def daily_totals(self, expenses: Iterable[ExpenseLike]) -> List[Dict[str, Any]]:
        totals: Dict[str, float] = defaultdict(float)
        for exp in parse_expenses(expenses):
            totals[exp.day_key] += exp.amount
        return [{"date": day, "amount": round(totals[day], 2)} for day in sorted(totals)]

    def weekday_totals(self, expenses: Iterable[ExpenseLike]) -> List[WeekdayTotal]:
        """
        Spend per day of week, Sunday first, for the spending heatmap.
        """
        amounts = [0.0] * 7
        counts = [0] * 7
        for exp in parse_expenses(expenses):
            # datetime.weekday() is Monday=0; shift so Sunday=0
            slot = (exp.date.weekday() + 1) % 7
            amounts[slot] += exp.amount
            counts[slot] += 1

        return [
            WeekdayTotal(
                day=WEEKDAY_LABELS[slot],
                amount=round(amounts[slot], 2),
                count=counts[slot],
                average=round(amounts[slot] / counts[slot], 2) if counts[slot] else 0.0,
            )
            for slot in range(7)
        ]

    def category_breakdown(self, expenses: Iterable[ExpenseLike]) -> List[CategoryShare]:
        records = parse_expenses(expenses)
        if not records:
            return []

        totals = group_expenses_by_category(records)
        counts: Dict[str, int] = defaultdict(int)
        for exp in records:
            counts[exp.category] += 1

        grand_total = sum(totals.values())
        shares = [
            CategoryShare(
                category=category,
                total=round(total, 2),
                percentage=round(total / grand_total * 100, 1) if grand_total else 0.0,
                transaction_count=counts[category],
            )
            for category, total in totals.items()
        ]
        # sorted() is stable, so equal totals keep first-seen order
        return sorted(shares, key=lambda share: share.total, reverse=True)

    def top_categories(self, expenses: Iterable[ExpenseLike], month: Optional[str] = None) -> List[CategoryShare]:
        """
        Largest categories, optionally limited to one YYYY-MM month.
        """
        records = parse_expenses(expenses)
        if month:
            records = [exp for exp in records if exp.month_key == month]
        return self.category_breakdown(records)[: self._top_category_count]

    def monthly_trend(
        self,
        expenses: Iterable[ExpenseLike],
        today: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """
        Trailing window of calendar months ending at today's month, zero-filled.
        """
        today = today or datetime.now()
        window: Dict[str, float] = {}
        for offset in range(self._trend_months - 1, -1, -1):
            year, month = _shift_month(today.year, today.month, -offset)
            window[_month_key(year, month)] = 0.0

        for exp in parse_expenses(expenses):
            if exp.month_key in window:
                window[exp.month_key] += exp.amount

        return [{"month": key, "amount": round(amount, 2)} for key, amount in window.items()]

    def budget_status(self, expenses: Iterable[ExpenseLike], limit: Optional[float] = 0) -> BudgetStatus:
        limit = limit or 0
        total = sum(exp.amount for exp in parse_expenses(expenses))
        remaining = limit - total
        percent_used = total / limit * 100 if limit > 0 else 0.0

        if limit <= 0:
            state, message = BudgetState.NO_LIMIT, "No limit set."
        elif remaining < 0:
            state, message = BudgetState.OVER_LIMIT, f"Over limit by ${round_half_up(abs(remaining), 2)}!"
        elif percent_used >= NEAR_LIMIT_PERCENTAGE:
            state = BudgetState.NEAR_LIMIT
            message = f"Warning: You are close to your limit. Remaining: ${round_half_up(remaining, 2)}"
        else:
            state, message = BudgetState.ON_TRACK, f"You are on track. Remaining: ${round_half_up(remaining, 2)}"

        return BudgetStatus(
            limit=limit,
            total_spent=round(total, 2),
            remaining=round(remaining, 2),
            percent_used=round(percent_used, 1),
            status=state,
            message=message,
        )

    def summarize(
        self,
        expenses: Iterable[ExpenseLike],
        limit: Optional[float] = 0,
        today: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        records: List[Expense] = parse_expenses(expenses)
        today = today or datetime.now()
        prediction = predict_next_month(records)

        return {
            "prediction": prediction.model_dump(mode="json"),
            "next_month": get_next_month_string(today),
            "trend": trend_direction(prediction.regression, self._stable_slope_band).value,
            "recommendations": generate_recommendations(records, limit),
            "insights": get_spending_insights(records, limit).model_dump(mode="json"),
            "budget": self.budget_status(records, limit).model_dump(mode="json"),
            "category_breakdown": [share.to_dict() for share in self.category_breakdown(records)],
            "top_categories": [
                share.to_dict() for share in self.top_categories(records, _month_key(today.year, today.month))
            ],
            "weekday_totals": [day.to_dict() for day in self.weekday_totals(records)],
            "daily_totals": self.daily_totals(records),
            "monthly_trend": self.monthly_trend(records, today),
        }
