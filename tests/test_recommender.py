import copy

import pytest

from expense_insights.models.insights import ChangeDirection
from expense_insights.utils.recommender import (
    generate_recommendations,
    get_spending_insights,
    get_top_category,
    round_half_up,
)

over_budget_expenses = [
    {"category": "Food", "amount": 400.0, "description": "Groceries", "date": "2025-11-01T12:00:00Z"},
    {"category": "Food", "amount": 300.0, "description": "Dinner", "date": "2025-11-03T12:00:00Z"},
    {"category": "Transportation", "amount": 300.0, "description": "Train pass", "date": "2025-11-04T12:00:00Z"},
    {"category": "Shopping", "amount": 200.0, "description": "Shoes", "date": "2025-11-05T12:00:00Z"},
]

balanced_expenses = [
    {"category": "Food", "amount": 20.0, "date": "2025-11-01T12:00:00Z"},
    {"category": "Transportation", "amount": 20.0, "date": "2025-11-02T12:00:00Z"},
    {"category": "Shopping", "amount": 10.0, "date": "2025-11-03T12:00:00Z"},
]


def two_month_expenses(previous, latest):
    """Split each month's total evenly over two categories."""
    return [
        {"category": "Food", "amount": previous / 2, "date": "2025-10-05"},
        {"category": "Transportation", "amount": previous / 2, "date": "2025-10-06"},
        {"category": "Food", "amount": latest / 2, "date": "2025-11-05"},
        {"category": "Transportation", "amount": latest / 2, "date": "2025-11-06"},
    ]


def test_no_expenses():
    assert generate_recommendations([]) == ["Not enough data for recommendations."]
    assert generate_recommendations(None, 500) == ["Not enough data for recommendations."]


def test_over_budget():
    result = generate_recommendations(over_budget_expenses, 1000)
    assert "You are over budget by $200.00. Consider cutting back on Food." in result
    assert "Most of your spending is in Food (58%). Consider balancing your budget." in result
    assert len(result) == 2


def test_close_to_budget():
    expenses = [
        {"category": "Food", "amount": 300.0, "date": "2025-11-01"},
        {"category": "Transportation", "amount": 300.0, "date": "2025-11-02"},
        {"category": "Shopping", "amount": 250.0, "date": "2025-11-03"},
    ]
    result = generate_recommendations(expenses, 1000)
    assert result == ["You are close to your budget (85%). Be careful with Food."]


def test_category_dominance():
    expenses = [
        {"category": "Food", "amount": 80.0, "date": "2025-11-01"},
        {"category": "Other", "amount": 20.0, "date": "2025-11-02"},
    ]
    assert generate_recommendations(expenses) == [
        "Most of your spending is in Food (80%). Consider balancing your budget."
    ]


def test_spending_increase():
    result = generate_recommendations(two_month_expenses(100, 150))
    assert result == ["Your spending increased by 50% compared to last month."]


def test_spending_decrease():
    result = generate_recommendations(two_month_expenses(200, 150))
    assert result == ["Your spending decreased by 25% compared to last month."]


def test_fractional_change_keeps_one_decimal():
    result = generate_recommendations(two_month_expenses(80, 90))
    assert result == ["Your spending increased by 12.5% compared to last month."]


def test_half_percentages_round_up():
    expenses = [
        {"category": "Food", "amount": 625.0, "date": "2025-11-01"},
        {"category": "Rent", "amount": 375.0, "date": "2025-11-02"},
    ]
    assert generate_recommendations(expenses) == [
        "Most of your spending is in Food (63%). Consider balancing your budget."
    ]

    expenses = [
        {"category": "Food", "amount": 300.0, "date": "2025-11-01"},
        {"category": "Transportation", "amount": 300.0, "date": "2025-11-02"},
        {"category": "Shopping", "amount": 225.0, "date": "2025-11-03"},
    ]
    assert generate_recommendations(expenses, 1000) == [
        "You are close to your budget (83%). Be careful with Food."
    ]


def test_round_half_up():
    assert str(round_half_up(62.5)) == "63"
    assert str(round_half_up(0.125, 2)) == "0.13"
    assert str(round_half_up(12.25, 1)) == "12.3"
    assert str(round_half_up(200, 2)) == "200.00"


def test_small_change_is_ignored():
    assert generate_recommendations(two_month_expenses(100, 103)) == ["You are on track with your spending."]


def test_on_track_fallback():
    assert generate_recommendations(balanced_expenses) == ["You are on track with your spending."]


def test_well_under_budget_fallback():
    assert generate_recommendations(balanced_expenses, 1000) == ["Great job! You are well under your budget."]


def test_zero_previous_month_skips_trend():
    expenses = [
        {"category": "Food", "amount": 0.0, "date": "2025-10-05"},
        {"category": "Food", "amount": 50.0, "date": "2025-11-05"},
        {"category": "Transportation", "amount": 50.0, "date": "2025-11-06"},
    ]
    assert generate_recommendations(expenses) == ["You are on track with your spending."]

    change = get_spending_insights(expenses).month_over_month_change
    assert change.percentage == 0
    assert change.direction == ChangeDirection.INCREASE
    assert change.has_change is False


def test_recommendations_are_idempotent():
    snapshot = copy.deepcopy(over_budget_expenses)
    first = generate_recommendations(over_budget_expenses, 1000)
    second = generate_recommendations(over_budget_expenses, 1000)
    assert first == second
    assert over_budget_expenses == snapshot


def test_spending_insights():
    insights = get_spending_insights(over_budget_expenses, 1000)
    assert insights.total_spent == 1200
    assert insights.category_totals == {"Food": 700, "Transportation": 300, "Shopping": 200}
    assert insights.top_category == "Food"
    assert insights.budget_percentage == pytest.approx(120)
    assert insights.is_over_budget is True
    assert insights.month_over_month_change.has_change is False
    assert insights.month_over_month_change.direction == ChangeDirection.STABLE


def test_spending_insights_without_limit():
    insights = get_spending_insights(two_month_expenses(200, 150))
    assert insights.budget_percentage == 0
    assert insights.is_over_budget is False
    assert insights.month_over_month_change.percentage == 25.0
    assert insights.month_over_month_change.direction == ChangeDirection.DECREASE
    assert insights.month_over_month_change.has_change is True


def test_spending_insights_empty():
    insights = get_spending_insights([])
    assert insights.total_spent == 0
    assert insights.category_totals == {}
    assert insights.top_category is None
    assert insights.budget_percentage == 0
    assert insights.is_over_budget is False
    assert insights.month_over_month_change.has_change is False


def test_missing_category_defaults_to_other():
    insights = get_spending_insights([{"amount": 12.5, "date": "2025-11-01"}, {"amount": 2.5, "category": "", "date": "2025-11-02"}])
    assert insights.category_totals == {"Other": 15.0}


def test_top_category():
    assert get_top_category({}) is None
    assert get_top_category({"Food": 0.0}) is None
    assert get_top_category({"Food": 50.0, "Rent": 50.0}) == "Food"
    assert get_top_category({"Food": 50.0, "Rent": 60.0}) == "Rent"


def test_spending_insights_are_idempotent():
    first = get_spending_insights(two_month_expenses(200, 150), 500)
    second = get_spending_insights(two_month_expenses(200, 150), 500)
    assert first == second
    assert first.model_dump_json() == second.model_dump_json()


def test_non_string_fields_do_not_drop_records():
    expenses = [
        {"amount": 100.0, "category": 7, "description": 12345, "date": "2025-11-01"},
        {"amount": 50.0, "category": "Food", "description": "x", "date": "2025-11-02"},
    ]
    insights = get_spending_insights(expenses)
    assert insights.total_spent == 150
    assert insights.category_totals == {"Other": 100.0, "Food": 50.0}
