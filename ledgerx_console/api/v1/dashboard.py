"""Read endpoints backing the live dashboard"""

from fastapi import APIRouter, Depends, Query, Request

from ledgerx_console.api.dependencies import get_request_id, get_session
from ledgerx_console.api.errors import to_http_exception
from ledgerx_console.api.v1.schemas import (
    AccountSchema,
    DashboardResponse,
    StatusResponse,
    TransactionPageResponse,
)
from ledgerx_console.domain.exceptions import DomainException
from ledgerx_console.orchestration.session import DemoSession

router = APIRouter()


@router.get("/status", response_model=StatusResponse)
def get_status(session: DemoSession = Depends(get_session)):
    """Backend readiness and the notice currently on display"""
    coordinator = session.coordinator
    return StatusResponse.build(coordinator.current_state().value, coordinator.notices.current)


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(session: DemoSession = Depends(get_session)):
    """Last polled wallets and completed transactions; never blocks on LedgerX"""
    return DashboardResponse.from_domain(session.poller.snapshot())


@router.get("/accounts/{account_number}", response_model=AccountSchema)
async def get_account(
    account_number: str,
    request: Request,
    session: DemoSession = Depends(get_session),
):
    try:
        account = await session.get_account(account_number)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return AccountSchema.from_domain(account)


@router.get("/transactions", response_model=TransactionPageResponse)
async def list_transactions(
    request: Request,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    session: DemoSession = Depends(get_session),
):
    """Page through the ledger, newest first"""
    try:
        result = await session.list_transactions(page, size)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return TransactionPageResponse.from_domain(result)
