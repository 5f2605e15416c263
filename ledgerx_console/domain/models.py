"""Domain models - pure Python dataclasses representing LedgerX entities"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from ledgerx_console.domain.exceptions import InvalidTransferError


class BackendState(str, Enum):
    """Readiness of the remote LedgerX service for one session"""

    WAKING = "waking"
    READY = "ready"
    ERROR = "error"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class NoticeState:
    """Human-facing notice derived from backend state and display timers"""

    kind: BackendState
    message: str


@dataclass
class Account:
    """Wallet as reported by LedgerX"""

    id: str
    account_number: str
    balance: float
    currency: str


@dataclass
class Transaction:
    """Transfer record as reported by LedgerX"""

    id: str
    idempotency_key: str
    status: TransactionStatus
    created_at: Optional[datetime]
    from_account: Optional[str] = None
    to_account: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    error_message: Optional[str] = None
    completed_at: Optional[datetime] = None


@dataclass
class Page:
    """One page of transactions"""

    items: List[Transaction]
    page_number: int
    page_size: int
    total_pages: int
    total_elements: int
    first: bool = True
    last: bool = True


@dataclass
class TransferRequest:
    """Body of POST /api/v1/transfers"""

    from_account: str
    to_account: str
    amount: float
    currency: str

    def validate(self) -> None:
        """Raise InvalidTransferError unless the request can be submitted"""
        if isinstance(self.amount, bool) or not isinstance(self.amount, (int, float)):
            raise InvalidTransferError("Transfer amount must be a number.")
        if not math.isfinite(self.amount) or self.amount <= 0:
            raise InvalidTransferError("Enter a transfer amount greater than 0.")
        if not self.from_account or not self.to_account:
            raise InvalidTransferError("Source and destination accounts are required.")
        if not self.currency:
            raise InvalidTransferError("Currency is required.")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "fromAccount": self.from_account,
            "toAccount": self.to_account,
            "amount": self.amount,
            "currency": self.currency,
        }


@dataclass
class HealthStatus:
    """Health payload of the remote service"""

    status: str

    @property
    def ok(self) -> bool:
        # Spring Actuator reports "UP"
        return self.status.strip().lower() in ("ok", "up")


@dataclass
class BatchSummary:
    """Aggregated outcome of a concurrent transfer batch"""

    requested: int
    succeeded: int = 0
    conflicts: int = 0
    insufficient_funds: int = 0
    other_errors: int = 0
    duration_ms: int = 0

    @property
    def settled(self) -> int:
        return self.succeeded + self.conflicts + self.insufficient_funds + self.other_errors

    def describe(self) -> str:
        summary = (
            f"{self.succeeded}/{self.requested} succeeded in {self.duration_ms}ms. "
            f"{self.conflicts} conflicts, {self.insufficient_funds} insufficient funds"
        )
        if self.other_errors > 0:
            summary += f", {self.other_errors} other errors"
        return summary + "."


@dataclass
class DashboardSnapshot:
    """Last known dashboard view: wallets, highlights, completed ledger events"""

    state: BackendState
    wallets: Dict[str, Optional[Account]] = field(default_factory=dict)
    highlights: Dict[str, Optional[str]] = field(default_factory=dict)
    transactions: List[Transaction] = field(default_factory=list)
    live_error: Optional[str] = None
    last_polled_at: Optional[datetime] = None
