"""
expense_insights
~~~~~~~~~~~~~~~~

Prediction & insights engine for the personal expense tracker. The helpers
are pure functions over an in-memory list of expenses so the same logic can be
called from the FastAPI routes, background jobs, or directly from Python.
"""

from expense_insights.utils.analyzer import SpendingAnalyzer
from expense_insights.utils.categorizer import get_categories, suggest_category
from expense_insights.utils.predictor import get_next_month_string, predict_next_month
from expense_insights.utils.recommender import generate_recommendations, get_spending_insights

__all__ = [
    "SpendingAnalyzer",
    "generate_recommendations",
    "get_categories",
    "get_next_month_string",
    "get_spending_insights",
    "predict_next_month",
    "suggest_category",
]
