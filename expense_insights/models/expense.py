import logging
from datetime import date, datetime, time
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Other"


class Expense(BaseModel):
    """One logged spending event as stored by the UI's document store."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[str, int]] = None
    amount: float = Field(ge=0, allow_inf_nan=False)
    category: str = DEFAULT_CATEGORY
    description: Optional[str] = ""
    date: datetime

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value.strip():
            return DEFAULT_CATEGORY
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: Any) -> str:
        # Free text from the store, coerced rather than rejected
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("date", mode="before")
    @classmethod
    def _accept_plain_dates(cls, value: Any) -> Any:
        # Date-only values land on midnight of that day
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.min)
        if isinstance(value, str) and len(value.strip()) == 10:
            return f"{value.strip()}T00:00:00"
        return value

    @property
    def month_key(self) -> str:
        return f"{self.date.year:04d}-{self.date.month:02d}"

    @property
    def day_key(self) -> str:
        return f"{self.date.year:04d}-{self.date.month:02d}-{self.date.day:02d}"


class ExpenseBatch(BaseModel):
    expenses: List[Expense] = Field(default_factory=list)


class BudgetedExpenseBatch(ExpenseBatch):
    limit: float = Field(default=0, ge=0)


class CategorizeRequest(BaseModel):
    description: Optional[str] = ""


ExpenseLike = Union[Expense, Mapping[str, Any]]


def parse_expenses(records: Optional[Iterable[ExpenseLike]]) -> List[Expense]:
    """
    Normalize raw records (models or plain dicts) into validated expenses.

    Records that fail validation are skipped so that a bad amount or date
    never leaks into a sum.
    """
    if not records:
        return []

    parsed: List[Expense] = []
    for index, record in enumerate(records):
        if isinstance(record, Expense):
            parsed.append(record)
            continue
        try:
            parsed.append(Expense.model_validate(record))
        except ValidationError as e:
            logger.warning(f"Skipping invalid expense record at position {index}: {e.error_count()} error(s)")
    return parsed
