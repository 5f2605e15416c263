"""One console session: the client, readiness gate, fan-out and live feed it owns"""

import logging
from typing import Optional

from ledgerx_console.config import settings
from ledgerx_console.domain.models import BatchSummary, Page, Transaction, TransferRequest, Account
from ledgerx_console.infrastructure.clients.ledger import LedgerClient
from ledgerx_console.orchestration.dashboard import DashboardPoller
from ledgerx_console.orchestration.fanout import FanOutOrchestrator
from ledgerx_console.orchestration.readiness import ReadinessCoordinator

logger = logging.getLogger(__name__)


class DemoSession:
    """
    Wires the orchestration layer together for the lifetime of a session.

    Every user action goes through `coordinator.ensure_ready()` before it
    touches the network.
    """

    def __init__(
        self,
        client: LedgerClient | None = None,
        coordinator: ReadinessCoordinator | None = None,
        poller: DashboardPoller | None = None,
    ):
        self.client = client or LedgerClient()
        self.coordinator = coordinator or ReadinessCoordinator(self.client.probe_health)
        self.orchestrator = FanOutOrchestrator(self.client, self.coordinator)
        self.poller = poller or DashboardPoller(self.client, self.coordinator)

    def start(self) -> None:
        self.coordinator.start()
        self.poller.start()

    async def close(self) -> None:
        await self.poller.close()
        await self.coordinator.close()
        await self.client.aclose()

    def _template(self, amount: float, currency: Optional[str]) -> TransferRequest:
        wallets = self.poller.snapshot().wallets
        known = wallets.get("A") or wallets.get("B")
        return TransferRequest(
            from_account=self.poller.wallets["A"],
            to_account=self.poller.wallets["B"],
            amount=amount,
            currency=currency or (known.currency if known else settings.default_currency),
        )

    async def manual_transfer(
        self,
        amount: float,
        from_account: Optional[str] = None,
        to_account: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> Transaction:
        """Send one transfer (wallet A to wallet B unless told otherwise)"""
        request = self._template(amount, currency)
        request.from_account = from_account or request.from_account
        request.to_account = to_account or request.to_account
        request.validate()

        await self.coordinator.ensure_ready()
        transaction = await self.client.submit_transfer(request)
        logger.info("Transfer completed", extra={"transaction_id": transaction.id})

        self.poller.schedule_refresh()
        return transaction

    async def stress_test(self, concurrency: int, amount: float | None = None) -> BatchSummary:
        template = self._template(amount if amount is not None else settings.stress_transfer_amount, None)
        summary = await self.orchestrator.run_batch(template, concurrency)
        self.poller.schedule_refresh()
        return summary

    async def reset(self) -> None:
        await self.coordinator.ensure_ready()
        await self.client.reset_demo_state()
        logger.info("Demo state reset")
        self.poller.schedule_refresh()

    async def get_account(self, account_number: str) -> Account:
        await self.coordinator.ensure_ready()
        return await self.client.get_account(account_number)

    async def list_transactions(self, page: int, page_size: int) -> Page:
        await self.coordinator.ensure_ready()
        return await self.client.list_transactions(page, page_size)
