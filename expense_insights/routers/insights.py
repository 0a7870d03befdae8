import logging
from typing import Dict, List

from fastapi import APIRouter, HTTPException

from expense_insights.core.config import settings
from expense_insights.models.expense import BudgetedExpenseBatch, CategorizeRequest, ExpenseBatch
from expense_insights.models.insights import PredictionResult, SpendingInsights
from expense_insights.utils.analyzer import SpendingAnalyzer
from expense_insights.utils.categorizer import get_categories, suggest_category
from expense_insights.utils.predictor import get_next_month_string, predict_next_month
from expense_insights.utils.recommender import generate_recommendations, get_spending_insights

router = APIRouter()
logger = logging.getLogger(__name__)
spending_analyzer = SpendingAnalyzer(
    trend_months=settings.TREND_MONTHS,
    top_category_count=settings.TOP_CATEGORY_COUNT,
    stable_slope_band=settings.STABLE_SLOPE_BAND,
)


@router.get("/categories")
def list_categories() -> Dict[str, List[str]]:
    return {"categories": get_categories()}


@router.post("/categorize")
def categorize(request: CategorizeRequest) -> Dict[str, str]:
    """
    Suggest a category for a description typed into the expense form.
    """
    return {"category": suggest_category(request.description)}


@router.post("/predict", response_model=PredictionResult)
def predict(batch: ExpenseBatch):
    try:
        prediction = predict_next_month(batch.expenses)
        logger.info(
            f"Predicted next month from {len(batch.expenses)} expenses: "
            f"{prediction.predicted_amount} ({prediction.method.value}, {prediction.confidence.value})"
        )
        return prediction
    except Exception as e:
        logger.error(f"Error predicting next month: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error predicting next month: {str(e)}")


@router.get("/next-month")
def next_month() -> Dict[str, str]:
    return {"month": get_next_month_string()}


@router.post("/recommendations")
def recommendations(batch: BudgetedExpenseBatch) -> Dict[str, List[str]]:
    try:
        result = generate_recommendations(batch.expenses, batch.limit)
        logger.info(f"Generated {len(result)} recommendations from {len(batch.expenses)} expenses")
        return {"recommendations": result}
    except Exception as e:
        logger.error(f"Error generating recommendations: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error generating recommendations: {str(e)}")


@router.post("/summary", response_model=SpendingInsights)
def summary(batch: BudgetedExpenseBatch):
    try:
        return get_spending_insights(batch.expenses, batch.limit)
    except Exception as e:
        logger.error(f"Error building spending insights: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error building spending insights: {str(e)}")


@router.post("/report")
def report(batch: BudgetedExpenseBatch) -> Dict:
    """
    Full dashboard bundle: forecast, recommendations, insights, budget status
    and chart series in one response.
    """
    try:
        logger.info(f"Building insights report for {len(batch.expenses)} expenses, limit={batch.limit}")
        return spending_analyzer.summarize(batch.expenses, batch.limit)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error building report: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")
