# core/card_queue.py
from typing import Iterable, Iterator, List, Optional
from flashlearn.schemas import StudyCard

class CardQueue:
    """
    Ordered cards for one pass plus a cursor.
    Cards before the cursor have already been answered in this pass.
    """

    def __init__(self, cards: Optional[Iterable[StudyCard]] = None):
        self._cards: List[StudyCard] = list(cards or [])
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[StudyCard]:
        return iter(self._cards)

    def __bool__(self) -> bool:
        return bool(self._cards)

    @property
    def cursor(self) -> int:
        return self._cursor

    def current(self) -> Optional[StudyCard]:
        if self._cursor < len(self._cards):
            return self._cards[self._cursor]
        return None

    def has_next(self) -> bool:
        return self._cursor + 1 < len(self._cards)

    def advance(self) -> None:
        # May step one past the end; current() then returns None
        if self._cursor < len(self._cards):
            self._cursor += 1

    def append(self, card: StudyCard) -> None:
        self._cards.append(card)

    def remaining(self) -> List[StudyCard]:
        """Cards not yet answered in this pass, current card included."""
        return self._cards[self._cursor:]

    def to_list(self) -> List[StudyCard]:
        return list(self._cards)
