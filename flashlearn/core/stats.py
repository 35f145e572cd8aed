# core/stats.py
from typing import Any, Optional, Protocol, Sequence
from flashlearn.core.log_manager import logger
from flashlearn.schemas import ProgressState

class DeckCounters(Protocol):
    id: Any
    card_count: Optional[int]
    mastered_count: Optional[int]

class DeckLister(Protocol):
    def list_decks(self, user_id: int) -> Sequence[DeckCounters]: ...

class ProgressStore(Protocol):
    def get_user_progress(self, user_id: int) -> ProgressState: ...
    def upsert_user_progress(self, user_id: int, **fields: Any) -> ProgressState: ...

class StatsAggregator:
    """
    Recomputes a user's total / mastered card counts from the per-deck counters.
    Only the deck-level cache is summed; card rows are never recounted here.
    """

    def __init__(self, decks: DeckLister, progress: ProgressStore):
        self._decks = decks
        self._progress = progress

    def recompute(self, user_id: int) -> ProgressState:
        total_cards = 0
        mastered_cards = 0

        for deck in self._decks.list_decks(user_id):
            card_count = max(deck.card_count or 0, 0)
            mastered_count = max(deck.mastered_count or 0, 0)
            if mastered_count > card_count:
                logger.warning(
                    f"Deck {deck.id} reports {mastered_count} mastered of {card_count} cards; clamping."
                )
                mastered_count = card_count
            total_cards += card_count
            mastered_cards += mastered_count

        # Creates the record if needed; streak fields stay as they are
        self._progress.get_user_progress(user_id)
        progress = self._progress.upsert_user_progress(
            user_id,
            total_cards=total_cards,
            mastered_cards=mastered_cards,
        )
        logger.info(f"Recomputed progress for user {user_id}: {mastered_cards}/{total_cards} mastered.")
        return progress
