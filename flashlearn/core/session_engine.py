# core/session_engine.py
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional
from flashlearn.core.card_queue import CardQueue
from flashlearn.core.log_manager import logger
from flashlearn.core.reveal_timer import RevealTimer
from flashlearn.schemas import StudyCard

class SessionPhase(str, Enum):
    IN_PRIMARY_PASS = "in_primary_pass"
    IN_REVIEW_PASS = "in_review_pass"
    COMPLETE = "complete"

class SessionError(Exception):
    """Base class for misuse of a study session."""
    pass

class EmptyQueue(SessionError):
    pass

class NoCurrentCard(SessionError):
    pass

class SessionDisposed(SessionError):
    pass

class SessionEngine:
    """
    Binary "know it / review again" study session over one deck.

    Cards already mastered are resolved up front. Every other card is shown
    once per pass; cards sent to review are replayed in the next pass until
    the learner knows them all.

    Transitions after an answer:
        1. more cards in this pass  -> next card
        2. review queue not empty   -> new pass over the review queue
        3. otherwise                -> COMPLETE, `on_complete(snapshot())`
    """

    def __init__(
        self,
        cards: Iterable[StudyCard],
        timer: Optional[RevealTimer] = None,
        on_complete: Optional[Callable[[List[StudyCard]], None]] = None,
        on_reveal: Optional[Callable[[StudyCard], None]] = None,
    ):
        self._timer = timer
        self.on_complete = on_complete
        self.on_reveal = on_reveal
        self._disposed = False

        self._original: List[StudyCard] = []
        self._primary = CardQueue()
        self._review = CardQueue()
        self._completed: Dict[int, StudyCard] = {}
        self._is_flipped = False
        self._pass_number = 1
        self._phase = SessionPhase.COMPLETE

        self.start(cards)

    # --- LIFECYCLE ---

    def start(self, cards: Iterable[StudyCard]) -> None:
        self._ensure_alive()
        self._cancel_reveal()

        cards = list(cards)
        seen = set()
        for card in cards:
            if card.id in seen:
                raise ValueError(f"Duplicate card id {card.id} in study session.")
            seen.add(card.id)

        self._original = cards
        self._completed = {c.id: c for c in cards if c.mastered}
        self._primary = CardQueue(c for c in cards if not c.mastered)
        self._review = CardQueue()
        self._is_flipped = False
        self._pass_number = 1
        self._phase = SessionPhase.IN_PRIMARY_PASS if self._primary else SessionPhase.COMPLETE

        logger.info(
            f"Study session started: {len(self._primary)} to study, "
            f"{len(self._completed)} already mastered."
        )
        self._arm_reveal()

    def restart(self) -> None:
        """Throws away in-session progress; pre-session mastery flags are kept."""
        self.start(self._original)

    def dispose(self) -> None:
        """Cancels the reveal timer. The engine can't be used afterwards."""
        self._cancel_reveal()
        self._disposed = True

    # --- QUERIES ---

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def is_flipped(self) -> bool:
        return self._is_flipped

    @property
    def pass_number(self) -> int:
        return self._pass_number

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def primary_queue(self) -> List[StudyCard]:
        return self._primary.remaining()

    @property
    def review_queue(self) -> List[StudyCard]:
        return self._review.to_list()

    @property
    def completed(self) -> List[StudyCard]:
        return list(self._completed.values())

    @property
    def total_cards(self) -> int:
        return len(self._original)

    @property
    def completed_count(self) -> int:
        return len(self._completed)

    @property
    def remaining_count(self) -> int:
        return len(self._primary.remaining()) + len(self._review)

    @property
    def progress(self) -> float:
        if not self._original:
            return 1.0
        return len(self._completed) / len(self._original)

    def is_session_complete(self) -> bool:
        return self._phase is SessionPhase.COMPLETE

    def current_card(self) -> StudyCard:
        card = None if self.is_session_complete() else self._primary.current()
        if card is None:
            raise EmptyQueue("No card to show. Check is_session_complete() first.")
        return card

    def snapshot(self) -> List[StudyCard]:
        """The whole deck, in its original order, with this session's mastery flags."""
        return [self._completed.get(c.id, c) for c in self._original]

    # --- MUTATORS ---

    def flip(self) -> bool:
        self._ensure_alive()
        self._require_current()
        self._cancel_reveal()
        self._is_flipped = not self._is_flipped
        return self._is_flipped

    def mark_known(self) -> None:
        self._ensure_alive()
        card = self._require_current()
        self._completed[card.id] = card.model_copy(update={"mastered": True})
        self._advance()

    def mark_review(self) -> None:
        self._ensure_alive()
        card = self._require_current()
        self._review.append(card)
        self._advance()

    # --- INTERNALS ---

    def _advance(self) -> None:
        self._cancel_reveal()
        self._is_flipped = False

        if self._primary.has_next():
            self._primary.advance()
        elif self._review:
            self._primary = self._review
            self._review = CardQueue()
            self._pass_number += 1
            self._phase = SessionPhase.IN_REVIEW_PASS
            logger.info(f"Starting pass {self._pass_number} with {len(self._primary)} review cards.")
        else:
            self._primary.advance()
            self._phase = SessionPhase.COMPLETE
            logger.info(
                f"Study session complete after {self._pass_number} pass(es); "
                f"{len(self._completed)}/{len(self._original)} cards mastered."
            )
            if self.on_complete:
                self.on_complete(self.snapshot())
            return

        self._arm_reveal()

    def _arm_reveal(self) -> None:
        if self._timer is None or self.is_session_complete():
            return
        self._timer.arm(self._primary.current(), self._auto_reveal)

    def _cancel_reveal(self) -> None:
        if self._timer is not None:
            self._timer.cancel()

    def _auto_reveal(self, card: StudyCard) -> None:
        if self._disposed or self.is_session_complete() or self._is_flipped:
            return
        current = self._primary.current()
        if current is None or current.id != card.id:
            return
        self._is_flipped = True
        if self.on_reveal:
            self.on_reveal(card)

    def _require_current(self) -> StudyCard:
        try:
            return self.current_card()
        except EmptyQueue:
            raise NoCurrentCard("The session has no current card.") from None

    def _ensure_alive(self) -> None:
        if self._disposed:
            raise SessionDisposed("This study session has been disposed.")
