# flashlearn/services/progress_service.py
from typing import Any, List
from sqlmodel import Session, select, col
from flashlearn.core.log_manager import logger
from flashlearn.core.stats import StatsAggregator
from flashlearn.database import create_session
from flashlearn.models import Deck, UserProgress, utcnow
from flashlearn.schemas import DeckSummary, ProgressState

PROGRESS_FIELDS = {"total_cards", "mastered_cards", "current_streak", "longest_streak", "last_study_date"}

class SqlProgressStore:
    """
    Deck listing and progress store on top of an open SQL session.
    Never commits: the owner of the session decides when the work is done,
    which lets a whole session sync run in one transaction.
    """

    def __init__(self, session: Session):
        self.session = session

    def list_decks(self, user_id: int) -> List[DeckSummary]:
        statement = select(Deck).where(Deck.owner_id == user_id).order_by(col(Deck.id))
        return [DeckSummary.model_validate(d) for d in self.session.exec(statement).all()]

    def _get_or_create_row(self, user_id: int) -> UserProgress:
        row = self.session.get(UserProgress, user_id)
        if row is None:
            row = UserProgress(user_id=user_id)
            self.session.add(row)
            self.session.flush()
            logger.info(f"Created progress record for user {user_id}")
        return row

    def get_user_progress(self, user_id: int) -> ProgressState:
        return ProgressState.model_validate(self._get_or_create_row(user_id))

    def upsert_user_progress(self, user_id: int, **fields: Any) -> ProgressState:
        unknown = set(fields) - PROGRESS_FIELDS
        if unknown:
            raise ValueError(f"Unknown progress fields: {sorted(unknown)}")

        row = self._get_or_create_row(user_id)
        for name, value in fields.items():
            setattr(row, name, value)
        row.updated_at = utcnow()
        self.session.add(row)
        self.session.flush()
        return ProgressState.model_validate(row)

# --- PUBLIC API (one transaction per call) ---

def get_user_progress(user_id: int) -> ProgressState:
    """
    Returns the user's progress, creating an all-zero record on first access.
    """
    with create_session() as session:
        progress = SqlProgressStore(session).get_user_progress(user_id)
        session.commit()
        return progress

def upsert_user_progress(user_id: int, **fields: Any) -> ProgressState:
    """
    Writes the given progress fields; the others keep their stored values.
    """
    with create_session() as session:
        progress = SqlProgressStore(session).upsert_user_progress(user_id, **fields)
        session.commit()
        return progress

def sync_user_progress(user_id: int) -> ProgressState:
    """
    Recalculates total/mastered card counts from the user's decks.
    Streak fields are left alone.
    """
    with create_session() as session:
        store = SqlProgressStore(session)
        progress = StatsAggregator(decks=store, progress=store).recompute(user_id)
        session.commit()
        return progress
