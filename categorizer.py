"""Keyword based category suggestions for imported transactions."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

from database import Category

# Ordering matters: the first keyword found in the description wins.
DEFAULT_KEYWORD_MAPPINGS: Tuple[Tuple[str, str], ...] = (
    ("restaurant", "Food & Dining"),
    ("cafe", "Food & Dining"),
    ("coffee", "Food & Dining"),
    ("uber", "Transportation"),
    ("lyft", "Transportation"),
    ("gas", "Transportation"),
    ("amazon", "Shopping"),
    ("walmart", "Shopping"),
    ("target", "Shopping"),
    ("netflix", "Entertainment"),
    ("spotify", "Entertainment"),
    ("doctor", "Healthcare"),
    ("pharmacy", "Healthcare"),
    ("electric", "Utilities"),
    ("water", "Utilities"),
    ("rent", "Housing"),
    ("mortgage", "Housing"),
)


def match_category(
    description: str,
    categories: Iterable[Category],
    keyword_mappings: Sequence[Tuple[str, str]] = DEFAULT_KEYWORD_MAPPINGS,
) -> Optional[Category]:
    """Pick the category that best fits ``description``.

    A category whose name appears (case-insensitively) in the description
    wins first, scanning ``categories`` in the order given.  Otherwise the
    first keyword from ``keyword_mappings`` found in the description selects
    a category name, which must exactly match one of ``categories``; if it
    does not, nothing is returned.
    """
    categories = list(categories)
    lowered = (description or "").lower()

    for category in categories:
        if category.name and category.name.lower() in lowered:
            return category

    for keyword, category_name in keyword_mappings:
        if keyword in lowered:
            return next((c for c in categories if c.name == category_name), None)

    return None
