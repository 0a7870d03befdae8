from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Confidence(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PredictionMethod(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    SAME_MONTH = "same_month"
    AVERAGE = "average"
    LINEAR_REGRESSION = "linear_regression"


class ChangeDirection(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    STABLE = "stable"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class BudgetState(str, Enum):
    NO_LIMIT = "no_limit"
    OVER_LIMIT = "over_limit"
    NEAR_LIMIT = "near_limit"
    ON_TRACK = "on_track"


class MonthlyAggregate(BaseModel):
    month: str  # YYYY-MM
    total: float = 0.0
    count: int = 0


class RegressionResult(BaseModel):
    slope: float
    intercept: float
    r_squared: float


class PredictionResult(BaseModel):
    predicted_amount: float
    confidence: Confidence
    method: PredictionMethod
    monthly_aggregates: List[MonthlyAggregate] = Field(default_factory=list)
    regression: Optional[RegressionResult] = None


class MonthChange(BaseModel):
    percentage: float = 0.0
    direction: ChangeDirection = ChangeDirection.STABLE
    has_change: bool = False


class SpendingInsights(BaseModel):
    total_spent: float = 0.0
    category_totals: Dict[str, float] = Field(default_factory=dict)
    top_category: Optional[str] = None
    budget_percentage: float = 0.0
    is_over_budget: bool = False
    month_over_month_change: MonthChange = Field(default_factory=MonthChange)


class BudgetStatus(BaseModel):
    limit: float
    total_spent: float
    remaining: float
    percent_used: float
    status: BudgetState
    message: str
