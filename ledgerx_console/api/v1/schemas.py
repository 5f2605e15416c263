"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ledgerx_console.config import settings
from ledgerx_console.domain.models import Account, BatchSummary, DashboardSnapshot, NoticeState, Page, Transaction


class TransferBody(BaseModel):
    """Request body for POST /v1/transfers"""

    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Amount to move")
    from_account: Optional[str] = Field(None, min_length=1, description="Defaults to wallet A")
    to_account: Optional[str] = Field(None, min_length=1, description="Defaults to wallet B")
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class StressTestBody(BaseModel):
    """Request body for POST /v1/transfers/stress-test"""

    concurrency: int = Field(settings.default_batch_size, ge=1, le=settings.max_batch_size)
    amount: float = Field(settings.stress_transfer_amount, gt=0, allow_inf_nan=False)


class AccountSchema(BaseModel):
    id: str
    account_number: str
    balance: float
    currency: str

    @classmethod
    def from_domain(cls, account: Account) -> "AccountSchema":
        return cls(
            id=account.id,
            account_number=account.account_number,
            balance=account.balance,
            currency=account.currency,
        )


class TransactionSchema(BaseModel):
    id: str
    idempotency_key: str
    status: str
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    from_account: Optional[str] = None
    to_account: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionSchema":
        return cls(
            id=txn.id,
            idempotency_key=txn.idempotency_key,
            status=txn.status.value,
            created_at=txn.created_at,
            completed_at=txn.completed_at,
            from_account=txn.from_account,
            to_account=txn.to_account,
            amount=txn.amount,
            currency=txn.currency,
            error_message=txn.error_message,
        )


class TransactionPageResponse(BaseModel):
    """Response for GET /v1/transactions"""

    items: List[TransactionSchema]
    page_number: int
    page_size: int
    total_pages: int
    total_elements: int
    first: bool
    last: bool

    @classmethod
    def from_domain(cls, page: Page) -> "TransactionPageResponse":
        return cls(
            items=[TransactionSchema.from_domain(txn) for txn in page.items],
            page_number=page.page_number,
            page_size=page.page_size,
            total_pages=page.total_pages,
            total_elements=page.total_elements,
            first=page.first,
            last=page.last,
        )


class BatchSummaryResponse(BaseModel):
    """Response for POST /v1/transfers/stress-test"""

    requested: int
    succeeded: int
    conflicts: int
    insufficient_funds: int
    other_errors: int
    duration_ms: int
    summary: str

    @classmethod
    def from_domain(cls, summary: BatchSummary) -> "BatchSummaryResponse":
        return cls(
            requested=summary.requested,
            succeeded=summary.succeeded,
            conflicts=summary.conflicts,
            insufficient_funds=summary.insufficient_funds,
            other_errors=summary.other_errors,
            duration_ms=summary.duration_ms,
            summary=summary.describe(),
        )


class NoticeSchema(BaseModel):
    kind: str
    message: str


class StatusResponse(BaseModel):
    """Response for GET /v1/status"""

    state: str
    notice: Optional[NoticeSchema] = None

    @classmethod
    def build(cls, state: str, notice: Optional[NoticeState]) -> "StatusResponse":
        return cls(
            state=state,
            notice=NoticeSchema(kind=notice.kind.value, message=notice.message) if notice else None,
        )


class DashboardResponse(BaseModel):
    """Response for GET /v1/dashboard"""

    state: str
    wallets: Dict[str, Optional[AccountSchema]]
    highlights: Dict[str, Optional[str]]
    transactions: List[TransactionSchema]
    live_error: Optional[str] = None
    last_polled_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, snapshot: DashboardSnapshot) -> "DashboardResponse":
        return cls(
            state=snapshot.state.value,
            wallets={
                key: AccountSchema.from_domain(account) if account else None
                for key, account in snapshot.wallets.items()
            },
            highlights=snapshot.highlights,
            transactions=[TransactionSchema.from_domain(txn) for txn in snapshot.transactions],
            live_error=snapshot.live_error,
            last_polled_at=snapshot.last_polled_at,
        )
