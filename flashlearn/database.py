# flashlearn/database.py
from pathlib import Path
from sqlmodel import SQLModel, create_engine, Session
from flashlearn.config import DATABASE_URL
from flashlearn.core.log_manager import logger

# check_same_thread=False is needed for SQLite with NiceGUI/FastAPI concurrency
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=False, connect_args=_connect_args)

def _ensure_sqlite_dir(url: str) -> None:
    prefix = "sqlite:///"
    if url.startswith(prefix) and len(url) > len(prefix):
        Path(url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)

def init_db():
    """
    Creates the database tables based on the models.
    Should be called on app startup.
    """
    from flashlearn.models import User, Deck, Card, UserProgress # Import to register models
    _ensure_sqlite_dir(str(engine.url))
    SQLModel.metadata.create_all(engine)
    logger.info(f"Database initialized at {engine.url}")

# Direct session factory. Looks `engine` up at call time so tests can swap it.
def create_session() -> Session:
    return Session(engine)
