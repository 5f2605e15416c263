"""Human-facing backend notices with an auto-clearing ready flash"""

from typing import Optional

from ledgerx_console.config import settings
from ledgerx_console.domain.exceptions import DEFAULT_UNAVAILABLE_MESSAGE
from ledgerx_console.domain.models import BackendState, NoticeState
from ledgerx_console.orchestration.timers import TimerRegistry

WAKING_MESSAGE = "Backend is starting up, please wait..."
READY_MESSAGE = "Backend ready"

_HIDE_TIMER = "hide-notice"


class NoticeBoard:
    """Observational projection of readiness for display; never authoritative"""

    def __init__(self, flash_seconds: float | None = None, timers: TimerRegistry | None = None):
        self.flash_seconds = settings.ready_flash_seconds if flash_seconds is None else flash_seconds
        self._timers = timers or TimerRegistry()
        self._current: Optional[NoticeState] = None

    @property
    def current(self) -> Optional[NoticeState]:
        return self._current

    def showing(self, *kinds: BackendState) -> bool:
        return self._current is not None and self._current.kind in kinds

    def show_waking(self) -> None:
        self._timers.cancel(_HIDE_TIMER)
        if not self.showing(BackendState.WAKING):
            self._current = NoticeState(kind=BackendState.WAKING, message=WAKING_MESSAGE)

    def show_error(self, message: str | None = None) -> None:
        self._timers.cancel(_HIDE_TIMER)
        self._current = NoticeState(kind=BackendState.ERROR, message=message or DEFAULT_UNAVAILABLE_MESSAGE)

    def flash_ready(self) -> None:
        """Show the ready notice, then clear it after `flash_seconds`"""
        self._current = NoticeState(kind=BackendState.READY, message=READY_MESSAGE)
        self._timers.schedule(_HIDE_TIMER, self.flash_seconds, self.clear)

    def clear(self) -> None:
        self._timers.cancel(_HIDE_TIMER)
        self._current = None

    def close(self) -> None:
        self._timers.cancel_all()
