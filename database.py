import os
from datetime import datetime
from enum import Enum

from sqlalchemy import create_engine, Column, Integer, String, Float, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.orm import sessionmaker, declarative_base, relationship
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Database Setup
# Default to local SQLite, but allow override (e.g. Postgres) through DATABASE_URL
DB_URL = os.getenv("DATABASE_URL", "sqlite:///finance_tracker.db")


def make_engine(url: str = DB_URL):
    return create_engine(url, connect_args={"check_same_thread": False} if url.startswith("sqlite") else {})


engine = make_engine(DB_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# --- Enums ---

class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"

    @property
    def display_name(self) -> str:
        return self.value.title()


class ReminderKind(str, Enum):
    BILL = "bill"
    BUDGET = "budget"
    GOAL = "goal"

    @property
    def display_name(self) -> str:
        return {
            ReminderKind.BILL: "Bill Reminder",
            ReminderKind.BUDGET: "Budget Alert",
            ReminderKind.GOAL: "Goal Reminder",
        }[self]


class DateRange(str, Enum):
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    ALL = "all"

# --- Models ---

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=True)
    uses_biometry = Column(Boolean, default=False)
    monthly_income = Column(Float, default=0.0)
    is_onboarded = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.now)

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True)
    budget_limit = Column(Float, default=0.0) # 0 means no ceiling

    # Display metadata
    color_hex = Column(String, nullable=True)
    icon_name = Column(String, nullable=True)

    transactions = relationship("Transaction", back_populates="category")

    def __repr__(self):
        return f"<Category {self.name!r}>"

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Float)                        # always a magnitude; direction lives in kind
    date = Column(Date)
    merchant = Column(String)
    notes = Column(String, nullable=True)
    kind = Column(String, default=TransactionKind.EXPENSE.value)

    is_recurring = Column(Boolean, default=False)
    recurring_frequency = Column(String, nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    category = relationship("Category", back_populates="transactions")

    # Metadata
    source = Column(String, default="manual")     # 'manual', 'csv_upload'
    created_at = Column(DateTime, default=datetime.now)

class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String)
    target_amount = Column(Float)
    current_amount = Column(Float, default=0.0)
    deadline = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    is_completed = Column(Boolean, default=False)

class Reminder(Base):
    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(DateTime)
    kind = Column(String) # 'bill', 'budget' or 'goal'
    title = Column(String)
    message = Column(String, nullable=True)
    is_enabled = Column(Boolean, default=True)

    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True)
    transaction = relationship("Transaction")

# --- Init DB ---
def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
