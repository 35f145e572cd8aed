# core/reveal_timer.py
import asyncio
from typing import Any, Callable, Optional, Protocol
from flashlearn.config import AUTO_REVEAL_DELAY_MS
from flashlearn.core.log_manager import logger
from flashlearn.schemas import StudyCard

class TimerHandle(Protocol):
    def cancel(self) -> Any: ...

class Scheduler(Protocol):
    """Runs `callback` once after `delay` seconds. The returned handle cancels it."""
    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

class AsyncioScheduler:
    """Scheduler backed by the running asyncio loop (`loop.call_later`)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)

class DoubleArm(RuntimeError):
    """Raised when arming a RevealTimer that is already armed."""
    pass

class RevealTimer:
    """
    Single-shot timer that reveals the back of the current card.

    At most one timer is armed at a time. A fire that arrives after cancel()
    (e.g. the scheduler could not withdraw it in time) is dropped.
    """

    def __init__(self, scheduler: Scheduler, delay_ms: int = AUTO_REVEAL_DELAY_MS):
        if delay_ms < 0:
            raise ValueError("Reveal delay must not be negative.")
        self._scheduler = scheduler
        self.delay_ms = delay_ms
        self._handle: Optional[TimerHandle] = None
        self._card: Optional[StudyCard] = None
        self._generation = 0

    @property
    def armed(self) -> bool:
        return self._handle is not None

    @property
    def armed_card(self) -> Optional[StudyCard]:
        return self._card

    def arm(
        self,
        card: StudyCard,
        on_fire: Callable[[StudyCard], None],
        delay_ms: Optional[int] = None,
    ) -> None:
        if self.armed:
            raise DoubleArm(f"Reveal timer already armed for card {self._card.id if self._card else '?'}.")

        self._generation += 1
        generation = self._generation
        delay = self.delay_ms if delay_ms is None else delay_ms

        def _fire():
            if generation != self._generation or not self.armed:
                logger.debug(f"Dropping stale reveal for card {card.id}.")
                return
            self._handle = None
            self._card = None
            on_fire(card)

        self._card = card
        self._handle = self._scheduler.schedule(delay / 1000, _fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._card = None
        # Invalidates any callback the scheduler still delivers
        self._generation += 1
