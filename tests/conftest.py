import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from flashlearn import database
from flashlearn.models import User, Deck, Card, UserProgress  # registers the tables
from flashlearn.schemas import StudyCard
from flashlearn.services.user_service import get_or_create_user


@pytest.fixture
def db_engine(monkeypatch):
    """Fresh in-memory SQLite database patched in as the app engine."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    monkeypatch.setattr(database, "engine", engine)
    yield engine
    engine.dispose()


@pytest.fixture
def user_id(db_engine):
    return get_or_create_user("ada@example.com", "Ada").id


@pytest.fixture
def other_user_id(db_engine):
    return get_or_create_user("grace@example.com", "Grace").id


def make_cards(count, mastered=()):
    return [
        StudyCard(id=i, front=f"Q{i}", back=f"A{i}", mastered=i in mastered)
        for i in range(1, count + 1)
    ]


class FakeHandle:
    def __init__(self, scheduler, due, callback):
        self.scheduler = scheduler
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Manual clock. Nothing runs until advance() is called."""

    def __init__(self, honour_cancel=True):
        self.now_ms = 0
        self.handles = []
        self.honour_cancel = honour_cancel

    def schedule(self, delay, callback):
        handle = FakeHandle(self, self.now_ms + round(delay * 1000), callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def advance(self, ms):
        self.now_ms += ms
        due = [h for h in self.handles if h.due <= self.now_ms]
        for handle in sorted(due, key=lambda h: h.due):
            self.handles.remove(handle)
            if handle.cancelled and self.honour_cancel:
                continue
            handle.callback()


@pytest.fixture
def scheduler():
    return FakeScheduler()
