"""Live dashboard feed: wallet balances and completed ledger events"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ledgerx_console.config import settings
from ledgerx_console.domain.models import (
    Account,
    BackendState,
    DashboardSnapshot,
    Transaction,
    TransactionStatus,
)
from ledgerx_console.infrastructure.clients.ledger import LedgerClient
from ledgerx_console.orchestration.fanout import settle_all
from ledgerx_console.orchestration.readiness import ReadinessCoordinator
from ledgerx_console.orchestration.timers import TimerRegistry

logger = logging.getLogger(__name__)

HIGHLIGHT_UP = "up"
HIGHLIGHT_DOWN = "down"


class DashboardPoller:
    """
    Polls LedgerX on a fixed interval for the two demo wallets and the
    most recent completed transactions.

    Cycles never overlap: a tick that fires while the previous refresh is
    still in flight is skipped, not queued.
    """

    def __init__(
        self,
        client: LedgerClient,
        coordinator: ReadinessCoordinator,
        wallets: Dict[str, str] | None = None,
        interval: float | None = None,
        highlight_seconds: float | None = None,
        page_size: int | None = None,
    ):
        self.client = client
        self.coordinator = coordinator
        self.wallets = wallets or {"A": settings.account_a, "B": settings.account_b}
        self.interval = interval or settings.poll_interval_seconds
        self.highlight_seconds = settings.balance_flash_seconds if highlight_seconds is None else highlight_seconds
        self.page_size = page_size or settings.recent_transactions_size

        self._accounts: Dict[str, Optional[Account]] = {key: None for key in self.wallets}
        self._previous_balances: Dict[str, Optional[float]] = {key: None for key in self.wallets}
        self._highlights: Dict[str, Optional[str]] = {key: None for key in self.wallets}
        self._transactions: List[Transaction] = []
        self._timers = TimerRegistry()
        self._refreshing = False
        self._ticker: Optional[asyncio.Task] = None
        self._cycles: set[asyncio.Task] = set()

        self.live_error: Optional[str] = None
        self.last_polled_at: Optional[datetime] = None

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    def snapshot(self) -> DashboardSnapshot:
        return DashboardSnapshot(
            state=self.coordinator.current_state(),
            wallets=dict(self._accounts),
            highlights=dict(self._highlights),
            transactions=list(self._transactions),
            live_error=self.live_error,
            last_polled_at=self.last_polled_at,
        )

    def start(self) -> asyncio.Task:
        if self._ticker is None:
            self._ticker = asyncio.create_task(self._tick(), name="ledgerx-dashboard-poller")
        return self._ticker

    async def close(self) -> None:
        tasks = [task for task in (self._ticker, *self._cycles) if task is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._ticker = None
        self._timers.cancel_all()

    def schedule_refresh(self, notify_on_error: bool = False) -> asyncio.Task:
        """Start a poll cycle in the background; `close()` cancels it if still running"""
        cycle = asyncio.create_task(self.refresh(notify_on_error))
        self._cycles.add(cycle)
        cycle.add_done_callback(self._cycles.discard)
        return cycle

    async def wait_idle(self) -> None:
        """Wait for every background poll cycle started so far"""
        if self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)

    async def _tick(self) -> None:
        while True:
            # The reentrancy guard drops overlapping cycles
            self.schedule_refresh()
            await asyncio.sleep(self.interval)

    async def refresh(self, notify_on_error: bool = False) -> bool:
        """
        Run one poll cycle.

        Returns:
            False if the cycle was skipped (another one is running, or LedgerX
            is not ready yet), True once it ran
        """
        if self._refreshing:
            return False
        if self.coordinator.current_state() is not BackendState.READY:
            return False

        self._refreshing = True
        try:
            wallets_outcome, ledger_outcome = await settle_all([
                self._fetch_wallets(),
                self._fetch_recent_ledger(),
            ])

            failures = [o.error for o in (wallets_outcome, ledger_outcome) if not o.ok]
            if failures:
                self.live_error = getattr(failures[0], "message", None) or str(failures[0])
                log = logger.warning if notify_on_error else logger.debug
                log("Live feed issue", extra={"reason": self.live_error})
            else:
                self.live_error = None

            self.last_polled_at = datetime.now(timezone.utc)
            return True
        finally:
            self._refreshing = False

    async def _fetch_wallets(self) -> None:
        keys = list(self.wallets)
        outcomes = await settle_all(self.client.get_account(self.wallets[key]) for key in keys)
        for key, outcome in zip(keys, outcomes):
            if outcome.ok:
                self._apply_wallet_update(key, outcome.value)

        failed = next((o.error for o in outcomes if not o.ok), None)
        if failed is not None:
            raise failed

    async def _fetch_recent_ledger(self) -> None:
        page = await self.client.list_transactions(0, self.page_size)
        self._transactions = [txn for txn in page.items if txn.status is TransactionStatus.COMPLETED]

    def _apply_wallet_update(self, key: str, account: Account) -> None:
        previous = self._previous_balances[key]
        if previous is not None and account.balance != previous:
            self._highlights[key] = HIGHLIGHT_UP if account.balance > previous else HIGHLIGHT_DOWN
            self._timers.schedule(key, self.highlight_seconds, lambda: self._clear_highlight(key))

        self._previous_balances[key] = account.balance
        self._accounts[key] = account

    def _clear_highlight(self, key: str) -> None:
        self._highlights[key] = None
