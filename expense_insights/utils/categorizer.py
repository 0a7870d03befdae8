"""
Keyword based category suggestions for free-text expense descriptions.
"""
from typing import Any, List, Tuple

from expense_insights.models.expense import DEFAULT_CATEGORY

# Ordered (label, keywords) pairs. Matching is first-match-wins in this order,
# so overlapping keywords ("gas", "subway") resolve to the earlier category.
CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Grocery", (
        "walmart", "kroger", "aldi", "grocery", "supermarket", "food",
        "grocery store", "safeway", "whole foods", "trader joe",
    )),
    ("Transportation", (
        "uber", "lyft", "bus", "train", "taxi", "gas", "fuel", "parking",
        "metro", "subway", "flight", "airline",
    )),
    ("Entertainment", (
        "netflix", "spotify", "movie", "concert", "theater", "cinema", "game",
        "hulu", "disney", "amazon prime",
    )),
    ("Utilities", (
        "electric", "water", "gas", "internet", "phone", "cable", "utility",
        "electricity", "heating", "cooling",
    )),
    ("Healthcare", (
        "pharmacy", "doctor", "hospital", "medicine", "medical", "clinic",
        "dentist", "prescription", "health", "cvs", "walgreens",
    )),
    ("Shopping", (
        "amazon", "target", "mall", "clothes", "shopping", "store", "retail",
        "nike", "adidas", "best buy", "home depot",
    )),
    ("Food", (
        "restaurant", "mcdonald", "pizza", "coffee", "dining", "lunch",
        "dinner", "breakfast", "cafe", "starbucks", "subway", "burger",
    )),
)


def suggest_category(description: Any) -> str:
    """
    Suggest a category for an expense description.

    Anything that is not a non-empty string maps to "Other", as does text
    that matches no keyword.
    """
    if not isinstance(description, str) or not description.strip():
        return DEFAULT_CATEGORY

    text = description.lower().strip()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def get_categories() -> List[str]:
    return [category for category, _ in CATEGORY_KEYWORDS] + [DEFAULT_CATEGORY]
