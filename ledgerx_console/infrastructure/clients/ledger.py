"""LedgerX API HTTP client for accounts, transactions and transfers"""

import asyncio
import math
import re
import time
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ledgerx_console.config import settings
from ledgerx_console.domain.exceptions import ErrorCode, LedgerApiError
from ledgerx_console.domain.models import (
    Account,
    HealthStatus,
    Page,
    Transaction,
    TransactionStatus,
    TransferRequest,
)
from ledgerx_console.infrastructure.clients.errors import (
    classify_response,
    classify_transport_failure,
    parse_body,
)
from ledgerx_console.infrastructure.observability.metrics import (
    upstream_failure_counter,
    upstream_latency_histogram,
)

IDEMPOTENCY_HEADER = "Idempotency-Key"

_FRACTION = re.compile(r"(\.\d{6})\d+")


def new_idempotency_key() -> str:
    """Random 128-bit token, unique per logical transfer call"""
    return str(uuid.uuid4())


def _to_number(value: Any) -> float:
    try:
        parsed = float(value if value is not None else 0)
    except (TypeError, ValueError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    # Java Instants carry nanoseconds and a trailing Z
    normalized = _FRACTION.sub(r"\1", value.replace("Z", "+00:00"))
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _parse_account(data: Dict[str, Any]) -> Account:
    return Account(
        id=str(data["id"]),
        account_number=data["accountNumber"],
        balance=_to_number(data.get("balance")),
        currency=data.get("currency") or settings.default_currency,
    )


def _parse_transaction(data: Dict[str, Any]) -> Transaction:
    amount = data.get("amount")
    return Transaction(
        id=str(data["id"]),
        idempotency_key=data["idempotencyKey"],
        status=TransactionStatus(str(data["status"]).upper()),
        created_at=_parse_timestamp(data.get("createdAt")),
        from_account=data.get("fromAccount"),
        to_account=data.get("toAccount"),
        amount=_to_number(amount) if amount is not None else None,
        currency=data.get("currency"),
        error_message=data.get("errorMessage"),
        completed_at=_parse_timestamp(data.get("completedAt")),
    )


def _parse_page(data: Any, page: int, page_size: int) -> Page:
    # Older backends answer with a bare list of recent transactions
    if isinstance(data, list):
        return Page(
            items=[_parse_transaction(txn) for txn in data],
            page_number=0,
            page_size=len(data),
            total_pages=1,
            total_elements=len(data),
        )

    items: List[Transaction] = [_parse_transaction(txn) for txn in data.get("content", [])]
    total_pages = int(data.get("totalPages", 1))
    page_number = int(data.get("number", page))
    return Page(
        items=items,
        page_number=page_number,
        page_size=int(data.get("size", page_size)),
        total_pages=total_pages,
        total_elements=int(data.get("totalElements", len(items))),
        first=bool(data.get("first", page_number == 0)),
        last=bool(data.get("last", page_number >= total_pages - 1)),
    )


class LedgerClient:
    """Client for the remote LedgerX transfer API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        health_path: str | None = None,
    ):
        self.base_url = base_url or settings.api_base_url
        self.health_path = health_path or settings.health_path
        self.timeout = timeout or settings.http_timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
            limits=httpx.Limits(max_connections=settings.http_max_connections),
            headers={"Accept": "application/json", "Cache-Control": "no-store"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> Any:
        """
        Perform one call and normalize failures.

        Raises:
            LedgerApiError: On transport failure or any non-2xx response
        """
        if timeout is not None:
            kwargs["timeout"] = timeout

        start_time = time.perf_counter()
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            error = classify_transport_failure(e)
            upstream_failure_counter.labels(operation=operation, code=error.code.value).inc()
            raise error from e
        finally:
            upstream_latency_histogram.labels(operation=operation).observe(time.perf_counter() - start_time)

        body = parse_body(response)
        if not response.is_success:
            error = classify_response(response.status_code, body)
            upstream_failure_counter.labels(operation=operation, code=error.code.value).inc()
            raise error

        return body

    @staticmethod
    def _invalid_payload(what: str, body: Any, error: Exception) -> LedgerApiError:
        return LedgerApiError(
            message=f"Invalid {what} data from LedgerX: {error}",
            code=ErrorCode.HTTP_ERROR,
            status=None,
            details=body,
        )

    async def get_account(self, account_number: str) -> Account:
        """
        Fetch a wallet by its account number.

        Raises:
            LedgerApiError: NOT_FOUND when LedgerX has no such account
        """
        body = await self._request(
            "get_account", "GET", f"/api/v1/accounts/{quote(account_number, safe='')}"
        )
        try:
            return _parse_account(body)
        except (KeyError, TypeError, AttributeError) as e:
            raise self._invalid_payload("account", body, e) from e

    async def list_transactions(self, page: int = 0, page_size: int = 20) -> Page:
        """Fetch one page of transactions, newest first"""
        safe_page = max(0, math.floor(page))
        safe_size = max(1, math.floor(page_size))

        body = await self._request(
            "list_transactions",
            "GET",
            "/api/v1/transactions",
            params={"page": safe_page, "size": safe_size},
        )
        try:
            return _parse_page(body, safe_page, safe_size)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise self._invalid_payload("transaction page", body, e) from e

    async def submit_transfer(self, request: TransferRequest) -> Transaction:
        """
        Submit one transfer under a freshly minted idempotency key.

        Every call is a new logical transfer: keys are never reused, so
        deduplication of resubmitted intents is left to LedgerX.

        Raises:
            InvalidTransferError: Request rejected locally, nothing was sent
            LedgerApiError: CONFLICT / INSUFFICIENT_FUNDS / other classified failure
        """
        request.validate()

        body = await self._request(
            "submit_transfer",
            "POST",
            "/api/v1/transfers",
            headers={IDEMPOTENCY_HEADER: new_idempotency_key()},
            json=request.to_payload(),
        )
        try:
            return _parse_transaction(body)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise self._invalid_payload("transaction", body, e) from e

    async def reset_demo_state(self) -> None:
        """Restore LedgerX demo wallets to their pristine balances"""
        await self._request("reset_demo_state", "POST", "/api/v1/demo/reset")

    async def probe_health(self, timeout: float) -> HealthStatus:
        """
        Ask LedgerX whether it accepts requests.

        Raises:
            LedgerApiError: NETWORK_ERROR once `timeout` elapses, or any classified failure
        """
        try:
            # Bound the whole call, not just each socket operation
            body = await asyncio.wait_for(
                self._request("probe_health", "GET", self.health_path, timeout=timeout), timeout
            )
        except asyncio.TimeoutError as e:
            upstream_failure_counter.labels(operation="probe_health", code=ErrorCode.NETWORK_ERROR.value).inc()
            raise LedgerApiError(
                message=f"Health check timed out after {timeout:g}s.",
                code=ErrorCode.NETWORK_ERROR,
            ) from e

        if isinstance(body, dict) and body.get("status") is not None:
            return HealthStatus(status=str(body["status"]))
        return HealthStatus(status="unknown")
