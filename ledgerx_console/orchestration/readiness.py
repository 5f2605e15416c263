"""Session readiness state machine gating user actions on LedgerX availability"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from ledgerx_console.config import settings
from ledgerx_console.domain.exceptions import (
    DEFAULT_UNAVAILABLE_MESSAGE,
    BackendUnavailableError,
    LedgerApiError,
)
from ledgerx_console.domain.models import BackendState, HealthStatus
from ledgerx_console.infrastructure.observability.metrics import health_probe_counter, record_backend_state
from ledgerx_console.orchestration.notices import NoticeBoard

logger = logging.getLogger(__name__)

HealthProbe = Callable[[float], Awaitable[HealthStatus]]


def describe_wait(seconds: float) -> str:
    """Render the wait ceiling for people: 300 -> '5 minutes', 0.2 -> '0.2 seconds'"""
    if seconds >= 60 and seconds % 60 == 0:
        minutes = int(seconds // 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    return f"{seconds:g} second{'s' if seconds != 1 else ''}"


class ReadinessCoordinator:
    """
    Decides, once per session, whether LedgerX accepts requests.

    State starts at WAKING and moves exactly once to READY (a health probe
    succeeded) or ERROR (the wait ceiling elapsed). Any number of callers may
    await `ensure_ready()` concurrently; they all share a single probing loop
    and all observe the same outcome.
    """

    def __init__(
        self,
        probe: HealthProbe,
        attempt_timeout: float | None = None,
        retry_interval: float | None = None,
        max_wait: float | None = None,
        notices: NoticeBoard | None = None,
    ):
        self._probe = probe
        self.attempt_timeout = settings.health_check_timeout_seconds if attempt_timeout is None else attempt_timeout
        self.retry_interval = settings.wake_retry_interval_seconds if retry_interval is None else retry_interval
        self.max_wait = settings.wake_max_wait_seconds if max_wait is None else max_wait
        self.notices = notices or NoticeBoard()

        self._state = BackendState.WAKING
        self._waiters: List[asyncio.Future] = []
        self._probe_task: Optional[asyncio.Task] = None
        self._error_message = DEFAULT_UNAVAILABLE_MESSAGE
        self._last_probe_error: Optional[str] = None
        self._closed = False
        record_backend_state(self._state)

    def current_state(self) -> BackendState:
        return self._state

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def probe_task(self) -> Optional[asyncio.Task]:
        """The probing loop currently in flight, if any"""
        return self._probe_task

    @property
    def pending_waiters(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    def start(self) -> Optional[asyncio.Task]:
        """
        Begin probing unless a loop is already running or state is terminal.

        Guarded by the task handle rather than by state: a second call that
        arrives while the first loop is applying its result must not start
        another loop.
        """
        if self._closed or self._state is not BackendState.WAKING:
            return None
        if self._probe_task is None:
            self._probe_task = asyncio.create_task(self._probe_loop(), name="ledgerx-readiness-probe")
        return self._probe_task

    async def ensure_ready(self) -> None:
        """
        Suspend until LedgerX is ready.

        Raises:
            BackendUnavailableError: State is, or becomes, ERROR, or the
                session was torn down while waiting
        """
        if self._state is BackendState.READY:
            return

        if self._state is BackendState.ERROR:
            self.notices.show_error(self._error_message)
            raise BackendUnavailableError(self._error_message)

        if self._closed:
            raise BackendUnavailableError(DEFAULT_UNAVAILABLE_MESSAGE)

        self.notices.show_waking()
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        self.start()

        try:
            await waiter
        except BackendUnavailableError as e:
            self.notices.show_error(e.message)
            raise

    async def close(self) -> None:
        """Tear down the session: stop probing and release every waiter"""
        self._closed = True
        task = self._probe_task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.notices.close()
        self._reject_waiters(BackendUnavailableError(DEFAULT_UNAVAILABLE_MESSAGE))

    async def _probe_loop(self) -> None:
        loop = asyncio.get_running_loop()
        started_at = loop.time()
        try:
            while loop.time() - started_at < self.max_wait:
                attempt_started_at = loop.time()
                if await self._attempt():
                    self._transition(BackendState.READY)
                    return

                remaining = self.max_wait - (loop.time() - started_at)
                if remaining <= 0:
                    break

                # Slow attempts eat into the interval instead of adding to it
                elapsed = loop.time() - attempt_started_at
                next_delay = min(max(0.0, self.retry_interval - elapsed), remaining)
                if next_delay > 0:
                    await asyncio.sleep(next_delay)

            message = f"Backend is still unavailable after waiting up to {describe_wait(self.max_wait)}."
            if self._last_probe_error:
                message += f" Last error: {self._last_probe_error}"
            self._error_message = f"{message} Please try again later."
            self._transition(BackendState.ERROR)
        except Exception as e:
            logger.exception("Readiness probing crashed")
            self._error_message = str(e) or DEFAULT_UNAVAILABLE_MESSAGE
            self._transition(BackendState.ERROR)
        finally:
            self._probe_task = None

    async def _attempt(self) -> bool:
        """One bounded health probe; failures are recorded, never raised"""
        try:
            health = await asyncio.wait_for(self._probe(self.attempt_timeout), self.attempt_timeout)
        except asyncio.TimeoutError:
            health_probe_counter.labels(result="timeout").inc()
            self._last_probe_error = f"Health check timed out after {describe_wait(self.attempt_timeout)}."
            logger.info("Health probe timed out", extra={"timeout_seconds": self.attempt_timeout})
            return False
        except LedgerApiError as e:
            health_probe_counter.labels(result="error").inc()
            self._last_probe_error = e.message
            logger.info("Health probe failed", extra={"code": e.code.value, "status": e.status})
            return False
        except Exception as e:
            health_probe_counter.labels(result="error").inc()
            self._last_probe_error = str(e) or type(e).__name__
            logger.warning("Health probe raised unexpectedly", exc_info=True)
            return False

        if health.ok:
            health_probe_counter.labels(result="ok").inc()
            return True

        health_probe_counter.labels(result="not_ok").inc()
        self._last_probe_error = f"Health check reported status '{health.status}'."
        logger.info("Health probe not ok", extra={"health_status": health.status})
        return False

    def _transition(self, state: BackendState) -> None:
        if self._state is not BackendState.WAKING:
            return

        self._state = state
        record_backend_state(state)

        if state is BackendState.READY:
            logger.info("LedgerX backend ready")
            self._resolve_waiters()
            if self.notices.showing(BackendState.WAKING, BackendState.ERROR):
                self.notices.flash_ready()
        else:
            logger.warning("LedgerX backend unavailable", extra={"reason": self._error_message})
            self.notices.show_error(self._error_message)
            self._reject_waiters(BackendUnavailableError(self._error_message))

    def _resolve_waiters(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    def _reject_waiters(self, error: BackendUnavailableError) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_exception(error)
