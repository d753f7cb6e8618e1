from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from toto.data_collection.archive_store import ArchiveStore
from toto.models.base import Base


def make_draw(draw_number, numbers, additional=49, draw_date=None):
    """Build a draw dictionary the way the scraper and CSV importer do."""
    draw = {
        'draw_number': draw_number,
        'draw_date': draw_date or date(2020, 1, 2) + timedelta(days=draw_number),
        'additional_number': additional,
    }
    for i, n in enumerate(numbers, start=1):
        draw[f'winning_number_{i}'] = n
    return draw


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class ScriptedRandom:
    """Stand-in random source that replays a fixed sequence of numbers."""

    def __init__(self, values):
        self._values = iter(values)

    def randint(self, a, b):
        return next(self._values)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = Session()
    yield db
    db.close()


@pytest.fixture
def store(session):
    return ArchiveStore(session)


@pytest.fixture
def seeded_store(store):
    store.insert_draws([
        make_draw(3001, [3, 7, 12, 19, 28, 44], additional=1, draw_date=date(2023, 1, 2)),
        make_draw(3002, [1, 2, 3, 4, 5, 6], additional=7, draw_date=date(2023, 1, 5)),
        make_draw(3003, [10, 20, 30, 40, 45, 49], additional=11, draw_date=date(2023, 6, 1)),
    ])
    return store
