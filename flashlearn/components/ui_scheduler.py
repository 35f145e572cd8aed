from typing import Callable
from nicegui import ui

class UiTimerScheduler:
    """
    Scheduler for RevealTimer backed by `ui.timer(..., once=True)`.
    Must be used inside a page context so the timer belongs to the client and
    dies with it.
    """

    def schedule(self, delay: float, callback: Callable[[], None]) -> ui.timer:
        return ui.timer(delay, callback, once=True)
