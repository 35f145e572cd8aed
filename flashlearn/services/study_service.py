# flashlearn/services/study_service.py
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Callable, List, Optional, Sequence, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from flashlearn.core.log_manager import logger
from flashlearn.core.reveal_timer import RevealTimer
from flashlearn.core.session_engine import SessionEngine
from flashlearn.core.stats import StatsAggregator
from flashlearn.core.streak import AmbiguousStreakInput, next_progress
from flashlearn.database import create_session
from flashlearn.models import Card, utcnow
from flashlearn.schemas import DeckDetail, DeckSummary, ProgressState, StudyCard
from flashlearn.services.deck_service import (
    DeckNotFoundError, apply_deck_stats, get_deck, refresh_deck_counts, require_owned_deck,
)
from flashlearn.services.progress_service import SqlProgressStore

class SyncError(RuntimeError):
    """Persisting a finished session failed. Nothing was written."""
    pass

@dataclass
class StudySyncResult:
    deck: DeckSummary
    progress: ProgressState
    # False when the study time was before the last recorded one
    streak_updated: bool = True

# --- SESSION LIFECYCLE ---

def start_study_session(
    user_id: int,
    deck_id: int,
    timer: Optional[RevealTimer] = None,
    on_complete: Optional[Callable[[List[StudyCard]], None]] = None,
    on_reveal: Optional[Callable[[StudyCard], None]] = None,
) -> Tuple[DeckDetail, SessionEngine]:
    """
    Loads the deck and builds a session engine over its cards.
    Raises DeckNotFoundError if the user can't study this deck.
    """
    deck = get_deck(user_id, deck_id)
    if deck is None:
        raise DeckNotFoundError(f"Deck {deck_id} not found.")

    engine = SessionEngine(deck.cards, timer=timer, on_complete=on_complete, on_reveal=on_reveal)
    logger.info(f"User {user_id} started studying deck {deck_id} ({len(deck.cards)} cards)")
    return deck, engine

def complete_study_session(
    user_id: int,
    deck_id: int,
    cards: Sequence[StudyCard],
    studied_at: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> StudySyncResult:
    """
    Persists a finished session in one transaction:

    1. mastery flags from the session snapshot are written to the card rows
    2. the deck's cached counters and last_studied are refreshed
    3. the user's total/mastered counts are recomputed from all decks
    4. the daily streak is advanced

    On any database error the transaction is rolled back and SyncError is
    raised. The caller's in-memory session is left as it is.
    """
    studied_at = studied_at or datetime.now(timezone.utc)
    wanted = {c.id: c.mastered for c in cards}

    try:
        with create_session() as session:
            deck = require_owned_deck(session, user_id, deck_id)

            rows = session.exec(select(Card).where(Card.deck_id == deck.id)).all()
            now = utcnow()
            for row in rows:
                mastered = wanted.get(row.id)
                if mastered is None or mastered == row.mastered:
                    continue
                row.mastered = mastered
                row.updated_at = now
                session.add(row)

            skipped = set(wanted) - {r.id for r in rows}
            if skipped:
                # Deleted elsewhere while the session was running
                logger.warning(f"Ignoring {len(skipped)} cards no longer in deck {deck_id}: {sorted(skipped)}")

            refresh_deck_counts(session, deck)
            apply_deck_stats(deck, deck.card_count, deck.mastered_count, studied_at)
            session.add(deck)

            store = SqlProgressStore(session)
            progress = StatsAggregator(decks=store, progress=store).recompute(user_id)

            streak_updated = True
            try:
                advanced = next_progress(progress, studied_at, tz)
            except AmbiguousStreakInput as e:
                # Treat as a same-day session: keep the streak and the later date
                logger.warning(f"Streak left unchanged for user {user_id}: {e}")
                streak_updated = False
            else:
                progress = store.upsert_user_progress(
                    user_id,
                    current_streak=advanced.current_streak,
                    longest_streak=advanced.longest_streak,
                    last_study_date=advanced.last_study_date,
                )

            session.commit()
            session.refresh(deck)
            summary = DeckSummary.model_validate(deck)
    except SQLAlchemyError as e:
        logger.error(f"Failed to sync study session for deck {deck_id}: {e}")
        raise SyncError(f"Could not save study session: {e}") from e

    logger.info(
        f"Synced session for user {user_id}, deck {deck_id}: "
        f"{summary.mastered_count}/{summary.card_count} mastered, streak {progress.current_streak}"
    )
    return StudySyncResult(deck=summary, progress=progress, streak_updated=streak_updated)
