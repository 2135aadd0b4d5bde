from typing import Iterable, Optional

from database import init_db, SessionLocal, User
from record_store import RecordStore
from utils import get_logger

logger = get_logger(__name__)

# (name, icon, color)
DEFAULT_CATEGORIES = [
    ("Food & Dining", "fork.knife", "#FF6B6B"),
    ("Transportation", "car.fill", "#4ECDC4"),
    ("Shopping", "bag.fill", "#45B7D1"),
    ("Entertainment", "gamecontroller.fill", "#96CEB4"),
    ("Healthcare", "heart.fill", "#FFEAA7"),
    ("Utilities", "bolt.fill", "#DDA0DD"),
    ("Housing", "house.fill", "#98D8C8"),
    ("Education", "book.fill", "#F7DC6F"),
    ("Travel", "airplane", "#BB8FCE"),
    ("Personal Care", "person.fill", "#85C1E9"),
]


def complete_onboarding(
    store: RecordStore, monthly_income: float = 0.0, category_names: Optional[Iterable[str]] = None
) -> User:
    """Create the user and their chosen starter categories.

    ``category_names`` defaults to every entry in DEFAULT_CATEGORIES. Names
    that are not defaults, or that already exist, are ignored.
    """
    selected = set(category_names) if category_names is not None else {c[0] for c in DEFAULT_CATEGORIES}
    existing = {c.name for c in store.fetch_categories()}

    user = store.create_user(monthly_income=monthly_income)
    for name, icon, color in DEFAULT_CATEGORIES:
        if name in selected and name not in existing:
            store.create_category(name=name, color_hex=color, icon_name=icon)

    return store.mark_onboarded(user)


def seed_defaults():
    init_db()
    db = SessionLocal()
    store = RecordStore(db)

    # Check if a user exists
    if store.fetch_user():
        logger.info("User already exists. Skipping seed.")
        db.close()
        return

    complete_onboarding(store)
    logger.info("Database initialized with default categories.")
    db.close()

if __name__ == "__main__":
    seed_defaults()
