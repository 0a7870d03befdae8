"""
Next-month spending forecast using a least-squares trend over monthly totals.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from expense_insights.models.expense import ExpenseLike, parse_expenses
from expense_insights.models.insights import (
    Confidence,
    MonthlyAggregate,
    PredictionMethod,
    PredictionResult,
    RegressionResult,
    TrendDirection,
)

HIGH_CONFIDENCE_R_SQUARED = 0.7
MEDIUM_CONFIDENCE_R_SQUARED = 0.3


def group_expenses_by_month(expenses: Optional[Iterable[ExpenseLike]]) -> List[MonthlyAggregate]:
    """Sum and count expenses per calendar month, ascending by YYYY-MM key."""
    monthly: Dict[str, MonthlyAggregate] = {}
    for exp in parse_expenses(expenses):
        key = exp.month_key
        if key not in monthly:
            monthly[key] = MonthlyAggregate(month=key)
        monthly[key].total += exp.amount
        monthly[key].count += 1
    # Zero-padded keys sort chronologically
    return [monthly[key] for key in sorted(monthly)]


def calculate_linear_regression(monthly: List[MonthlyAggregate]) -> Optional[RegressionResult]:
    """
    Ordinary least squares of monthly total against month index.

    x is the position in the sorted sequence, so a skipped calendar month is
    not a gap in x.
    """
    n = len(monthly)
    if n < 2:
        return None

    xs = list(range(n))
    ys = [item.total for item in monthly]
    mean_x = sum(xs) / n
    mean_y = sum(ys) / n

    numerator = 0.0
    denominator = 0.0
    for x, y in zip(xs, ys):
        numerator += (x - mean_x) * (y - mean_y)
        denominator += (x - mean_x) ** 2

    slope = 0.0 if denominator == 0 else numerator / denominator
    intercept = mean_y - slope * mean_x

    ss_res = 0.0
    ss_tot = 0.0
    for x, y in zip(xs, ys):
        ss_res += (y - (slope * x + intercept)) ** 2
        ss_tot += (y - mean_y) ** 2

    r_squared = 1.0 if ss_tot == 0 else 1 - ss_res / ss_tot
    return RegressionResult(slope=slope, intercept=intercept, r_squared=r_squared)


def _confidence_for(month_count: int, r_squared: float) -> Confidence:
    if month_count >= 3 and r_squared > HIGH_CONFIDENCE_R_SQUARED:
        return Confidence.HIGH
    if month_count >= 2 and r_squared > MEDIUM_CONFIDENCE_R_SQUARED:
        return Confidence.MEDIUM
    return Confidence.LOW


def predict_next_month(expenses: Optional[Iterable[ExpenseLike]]) -> PredictionResult:
    monthly = group_expenses_by_month(expenses)

    if not monthly:
        return PredictionResult(
            predicted_amount=0,
            confidence=Confidence.NONE,
            method=PredictionMethod.INSUFFICIENT_DATA,
        )

    if len(monthly) == 1:
        return PredictionResult(
            predicted_amount=monthly[0].total,
            confidence=Confidence.LOW,
            method=PredictionMethod.SAME_MONTH,
            monthly_aggregates=monthly,
        )

    regression = calculate_linear_regression(monthly)
    if regression is None:
        average = sum(item.total for item in monthly) / len(monthly)
        return PredictionResult(
            predicted_amount=average,
            confidence=Confidence.MEDIUM,
            method=PredictionMethod.AVERAGE,
            monthly_aggregates=monthly,
        )

    next_index = len(monthly)
    # Spending cannot be negative
    predicted = max(0.0, regression.slope * next_index + regression.intercept)

    return PredictionResult(
        predicted_amount=round(predicted, 2),
        confidence=_confidence_for(len(monthly), regression.r_squared),
        method=PredictionMethod.LINEAR_REGRESSION,
        monthly_aggregates=monthly,
        regression=regression,
    )


def get_next_month_string(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    year, month = (now.year + 1, 1) if now.month == 12 else (now.year, now.month + 1)
    return f"{year:04d}-{month:02d}"


def trend_direction(regression: Optional[RegressionResult], band: float = 10.0) -> TrendDirection:
    """Label a fitted slope; slopes within +/- band per month count as stable."""
    if regression is None or abs(regression.slope) <= band:
        return TrendDirection.STABLE
    return TrendDirection.UP if regression.slope > 0 else TrendDirection.DOWN
