"""POST /v1/transfers - manual transfers and the concurrency stress test"""

from fastapi import APIRouter, Depends, Request

from ledgerx_console.api.dependencies import get_request_id, get_session
from ledgerx_console.api.errors import to_http_exception
from ledgerx_console.api.v1.schemas import (
    BatchSummaryResponse,
    StressTestBody,
    TransactionSchema,
    TransferBody,
)
from ledgerx_console.domain.exceptions import DomainException
from ledgerx_console.infrastructure.observability.logging import log_batch
from ledgerx_console.orchestration.session import DemoSession

router = APIRouter()


@router.post("/transfers", response_model=TransactionSchema)
async def create_transfer(
    body: TransferBody,
    request: Request,
    session: DemoSession = Depends(get_session),
):
    """
    Move money between the demo wallets.

    Waits for LedgerX readiness first; 409 and 422 from LedgerX are passed
    through so the caller can tell a lost race from an overdraft.
    """
    request_id = get_request_id(request)
    try:
        transaction = await session.manual_transfer(
            amount=body.amount,
            from_account=body.from_account,
            to_account=body.to_account,
            currency=body.currency,
        )
    except DomainException as e:
        raise to_http_exception(e, request_id)

    return TransactionSchema.from_domain(transaction)


@router.post("/transfers/stress-test", response_model=BatchSummaryResponse)
async def run_stress_test(
    body: StressTestBody,
    request: Request,
    session: DemoSession = Depends(get_session),
):
    """
    Fire `concurrency` simultaneous wallet A to wallet B transfers.

    Flow:
    1. Wait for LedgerX readiness (fails fast once the session gave up)
    2. Launch every submission at once, each with its own idempotency key
    3. Wait for all of them to settle and tally outcomes
    """
    request_id = get_request_id(request)
    try:
        summary = await session.stress_test(body.concurrency, body.amount)
    except DomainException as e:
        raise to_http_exception(e, request_id)

    log_batch(request_id, summary)
    return BatchSummaryResponse.from_domain(summary)
