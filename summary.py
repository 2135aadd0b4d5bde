from typing import Iterable, List

import pandas as pd

from database import Category, Goal, Transaction, TransactionKind

BUDGET_WARNING_RATIO = 0.8

COLUMNS = ["Date", "Description", "Amount", "Kind", "Category"]


def transactions_to_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    rows = [
        {
            "Date": t.date,
            "Description": t.merchant or "",
            "Amount": t.amount or 0.0,
            "Kind": t.kind,
            "Category": t.category.name if t.category is not None else None,
        }
        for t in transactions
    ]
    df = pd.DataFrame(rows, columns=COLUMNS)
    df["Date"] = pd.to_datetime(df["Date"])
    df["Amount"] = pd.to_numeric(df["Amount"], errors="coerce").fillna(0.0)
    return df


def _expenses(df: pd.DataFrame) -> pd.DataFrame:
    return df[df["Kind"] == TransactionKind.EXPENSE.value]


def total_spent(transactions: Iterable[Transaction]) -> float:
    df = transactions_to_frame(transactions)
    return float(_expenses(df)["Amount"].sum())


def category_spending(transactions: Iterable[Transaction]) -> List[dict]:
    """Expense totals per category, largest first. Uncategorized spend is left out."""

    df = _expenses(transactions_to_frame(transactions))
    df = df[df["Category"].notna()]
    if df.empty:
        return []

    by_cat = df.groupby("Category")["Amount"].sum().sort_values(ascending=False)
    return [{"category": name, "spent": float(spent)} for name, spent in by_cat.items()]


def budget_progress(transactions: Iterable[Transaction], monthly_income: float) -> dict:
    """Share of monthly income already spent."""

    spent = total_spent(transactions)
    ratio = spent / monthly_income if monthly_income and monthly_income > 0 else 0.0
    return {
        "spent": spent,
        "income": float(monthly_income or 0.0),
        "ratio": ratio,
        "over_threshold": ratio > BUDGET_WARNING_RATIO,
    }


def budget_watch(transactions: Iterable[Transaction], categories: Iterable[Category]) -> List[dict]:
    """Compute spend versus each category's budget ceiling."""

    spend_by_cat = {row["category"]: row["spent"] for row in category_spending(transactions)}

    progress = []
    for category in categories:
        limit = category.budget_limit or 0.0
        if limit <= 0:
            continue
        spent = spend_by_cat.get(category.name, 0.0)
        progress.append(
            {
                "category": category.name,
                "limit": float(limit),
                "spent": float(spent),
                "remaining": float(limit - spent),
                "ratio": spent / limit,
                "over_budget": spent > limit,
            }
        )
    return progress


def goal_progress(goal: Goal) -> float:
    if not goal.target_amount or goal.target_amount <= 0:
        return 0.0
    return min((goal.current_amount or 0.0) / goal.target_amount, 1.0)
