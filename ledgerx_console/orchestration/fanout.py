"""Concurrent transfer fan-out for the interactive stress test"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Iterable, List, Optional

from ledgerx_console.domain.exceptions import ErrorCode, InvalidTransferError, LedgerApiError
from ledgerx_console.domain.models import BatchSummary, TransferRequest
from ledgerx_console.infrastructure.clients.ledger import LedgerClient
from ledgerx_console.infrastructure.observability.metrics import record_batch
from ledgerx_console.orchestration.readiness import ReadinessCoordinator


@dataclass
class Outcome:
    """Settled result of one task: a value, or the exception it raised"""

    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _capture(awaitable: Awaitable[Any]) -> Outcome:
    try:
        return Outcome(value=await awaitable)
    except Exception as e:
        return Outcome(error=e)


async def settle_all(awaitables: Iterable[Awaitable[Any]]) -> List[Outcome]:
    """
    Run awaitables concurrently and wait for every one of them.

    A failure is captured in its Outcome instead of cancelling or
    short-circuiting the others. Results keep input order.
    """
    return list(await asyncio.gather(*(_capture(aw) for aw in awaitables)))


class FanOutOrchestrator:
    """Fires N identical transfers at once and tallies how each one ended"""

    def __init__(self, client: LedgerClient, coordinator: ReadinessCoordinator):
        self.client = client
        self.coordinator = coordinator

    async def run_batch(self, template: TransferRequest, count: int) -> BatchSummary:
        """
        Submit `count` concurrent transfers built from one template.

        Each submission gets its own idempotency key, so the batch is `count`
        distinct transfers racing inside LedgerX. Counting happens only after
        every submission has settled.

        Raises:
            InvalidTransferError: Bad template or count, nothing was sent
            BackendUnavailableError: LedgerX never became ready, nothing was sent
        """
        if count < 1:
            raise InvalidTransferError("Batch size must be at least 1.")
        template.validate()

        await self.coordinator.ensure_ready()

        started_at = time.perf_counter()
        outcomes = await settle_all(self.client.submit_transfer(template) for _ in range(count))
        duration_ms = round((time.perf_counter() - started_at) * 1000)

        summary = BatchSummary(requested=count, duration_ms=duration_ms)
        for outcome in outcomes:
            if outcome.ok:
                summary.succeeded += 1
            elif isinstance(outcome.error, LedgerApiError) and outcome.error.code is ErrorCode.CONFLICT:
                summary.conflicts += 1
            elif isinstance(outcome.error, LedgerApiError) and outcome.error.code is ErrorCode.INSUFFICIENT_FUNDS:
                summary.insufficient_funds += 1
            else:
                summary.other_errors += 1

        record_batch(summary)
        return summary
