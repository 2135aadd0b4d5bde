import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

sys.path.append(str(Path(__file__).parents[1]))

from database import Base
from record_store import RecordStore


@pytest.fixture
def session():
    """A fresh in-memory SQLite database per test."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield db
    db.close()
    engine.dispose()


@pytest.fixture
def store(session):
    return RecordStore(session)


@pytest.fixture
def categories(store):
    names = ["Food & Dining", "Groceries", "Shopping", "Transportation"]
    return [store.create_category(name) for name in names]
