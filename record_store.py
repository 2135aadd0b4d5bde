"""
record_store.py
---------------
Create/fetch/delete access to the tracker's records.

A ``RecordStore`` wraps one SQLAlchemy session and is handed to whoever needs
it (the import coordinator, the seeding script, the CLI).  Every create
commits straight away, so the store never holds pending work between calls.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import (
    Category,
    DateRange,
    Goal,
    Reminder,
    ReminderKind,
    Transaction,
    TransactionKind,
    User,
)
from utils import get_logger, start_of_month, start_of_previous_month

logger = get_logger(__name__)


class RecordStoreError(Exception):
    """Raised when the underlying database rejects a write."""


class RecordStore:
    def __init__(self, session: Session):
        self.session = session

    def _save(self, record):
        try:
            self.session.add(record)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to save %s: %s", type(record).__name__, exc)
            raise RecordStoreError(f"Could not save {type(record).__name__}: {exc}") from exc
        return record

    # --- Transactions ---

    def create_transaction(
        self,
        amount: float,
        date: date,
        description: Optional[str],
        category: Optional[Category] = None,
        note: Optional[str] = None,
        kind: TransactionKind = TransactionKind.EXPENSE,
        recurring: bool = False,
        recurring_frequency: Optional[str] = None,
        source: str = "manual",
    ) -> Transaction:
        txn = Transaction(
            amount=amount,
            date=date,
            merchant=description,
            notes=note,
            category=category,
            kind=TransactionKind(kind).value,
            is_recurring=recurring,
            recurring_frequency=recurring_frequency,
            source=source,
        )
        return self._save(txn)

    def fetch_transactions(
        self, date_range: DateRange = DateRange.THIS_MONTH, today: Optional[date] = None
    ) -> List[Transaction]:
        """Return transactions in ``date_range``, newest first.

        ``today`` pins the reference day; it defaults to the current date.
        """
        today = today or date.today()
        query = self.session.query(Transaction)

        if date_range == DateRange.THIS_MONTH:
            query = query.filter(Transaction.date >= start_of_month(today))
        elif date_range == DateRange.LAST_MONTH:
            query = query.filter(
                Transaction.date >= start_of_previous_month(today),
                Transaction.date < start_of_month(today),
            )

        return query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()

    # --- Categories ---

    def create_category(
        self,
        name: str,
        budget_limit: Optional[float] = None,
        color_hex: Optional[str] = None,
        icon_name: Optional[str] = None,
    ) -> Category:
        category = Category(
            name=name,
            budget_limit=budget_limit or 0.0,
            color_hex=color_hex,
            icon_name=icon_name,
        )
        return self._save(category)

    def fetch_categories(self) -> List[Category]:
        return self.session.query(Category).order_by(Category.name.asc()).all()

    # --- Goals ---

    def create_goal(self, name: str, target_amount: float, deadline: Optional[date] = None) -> Goal:
        goal = Goal(
            name=name,
            target_amount=target_amount,
            current_amount=0.0,
            deadline=deadline,
            is_completed=False,
        )
        return self._save(goal)

    def fetch_goals(self) -> List[Goal]:
        return self.session.query(Goal).order_by(Goal.created_at.desc(), Goal.id.desc()).all()

    def contribute_to_goal(self, goal: Goal, amount: float) -> Goal:
        """Add ``amount`` to the goal's savings; completes it once the target is met."""
        goal.current_amount = (goal.current_amount or 0.0) + amount
        if goal.target_amount is not None and goal.current_amount >= goal.target_amount:
            goal.is_completed = True
        return self._save(goal)

    # --- Users ---

    def create_user(
        self, email: Optional[str] = None, uses_biometry: bool = False, monthly_income: float = 0.0
    ) -> User:
        user = User(
            email=email,
            uses_biometry=uses_biometry,
            monthly_income=monthly_income,
            is_onboarded=False,
        )
        return self._save(user)

    def fetch_user(self) -> Optional[User]:
        return self.session.query(User).order_by(User.id.asc()).first()

    def mark_onboarded(self, user: User) -> User:
        user.is_onboarded = True
        return self._save(user)

    # --- Reminders ---

    def create_reminder(
        self,
        date: datetime,
        kind: ReminderKind,
        title: str,
        message: Optional[str] = None,
        transaction: Optional[Transaction] = None,
    ) -> Reminder:
        reminder = Reminder(
            date=date,
            kind=ReminderKind(kind).value,
            title=title,
            message=message,
            transaction=transaction,
            is_enabled=True,
        )
        return self._save(reminder)

    def fetch_reminders(self) -> List[Reminder]:
        return self.session.query(Reminder).order_by(Reminder.date.asc()).all()

    # --- Deletion ---

    def delete(self, record) -> None:
        try:
            self.session.delete(record)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to delete %s: %s", type(record).__name__, exc)
            raise RecordStoreError(f"Could not delete {type(record).__name__}: {exc}") from exc
