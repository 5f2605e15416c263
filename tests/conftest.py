"""Pytest fixtures for testing"""

import asyncio
import json
import time
import uuid
from contextlib import ExitStack
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Callable, Dict, Generator, List, Optional
from urllib.parse import unquote

import httpx
import pytest
from fastapi.testclient import TestClient

from ledgerx_console.api.main import create_app
from ledgerx_console.domain.models import HealthStatus
from ledgerx_console.infrastructure.clients.ledger import LedgerClient
from ledgerx_console.orchestration.dashboard import DashboardPoller
from ledgerx_console.orchestration.notices import NoticeBoard
from ledgerx_console.orchestration.readiness import ReadinessCoordinator
from ledgerx_console.orchestration.session import DemoSession

BASE_URL = "http://ledgerx.test"


class FakeLedger:
    """In-memory stand-in for the remote LedgerX API"""

    def __init__(self) -> None:
        self.balances: Dict[str, float] = {}
        self.transactions: List[Dict[str, Any]] = []
        self.requests: List[httpx.Request] = []
        # Queued canned replies for POST /api/v1/transfers; None means "process normally"
        self.transfer_script: List[Optional[httpx.Response]] = []
        self.health_status = "ok"
        self.health_failures = 0
        self.latency = 0.0
        # Canned failures by path, served before any normal handling
        self.outages: Dict[str, httpx.Response] = {}
        self.reset()

    def reset(self) -> None:
        self.balances = {"ACC-A-001": 1000.0, "ACC-B-001": 500.0}
        self.transactions = []

    def requests_to(self, path: str, method: Optional[str] = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.url.path == path and (method is None or r.method == method)
        ]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.latency:
            await asyncio.sleep(self.latency)

        path = request.url.path
        if path in self.outages:
            return self.outages[path]

        if path == "/health":
            if self.health_failures > 0:
                self.health_failures -= 1
                return httpx.Response(503, json={"status": "DOWN"})
            return httpx.Response(200, json={"status": self.health_status})

        if path.startswith("/api/v1/accounts/") and request.method == "GET":
            number = unquote(path.rsplit("/", 1)[1])
            if number not in self.balances:
                return httpx.Response(404, json={"status": 404, "message": f"Account {number} not found"})
            return httpx.Response(200, json={
                "id": f"id-{number}",
                "accountNumber": number,
                "balance": self.balances[number],
                "currency": "USD",
            })

        if path == "/api/v1/transactions" and request.method == "GET":
            page = int(request.url.params.get("page", 0))
            size = int(request.url.params.get("size", 20))
            newest_first = list(reversed(self.transactions))
            chunk = newest_first[page * size:(page + 1) * size]
            total_pages = max(1, -(-len(newest_first) // size))
            return httpx.Response(200, json={
                "content": chunk,
                "number": page,
                "size": size,
                "totalPages": total_pages,
                "totalElements": len(newest_first),
                "first": page == 0,
                "last": page >= total_pages - 1,
            })

        if path == "/api/v1/transfers" and request.method == "POST":
            if self.transfer_script:
                scripted = self.transfer_script.pop(0)
                if scripted is not None:
                    return scripted
            return self._transfer(request)

        if path == "/api/v1/demo/reset" and request.method == "POST":
            self.reset()
            return httpx.Response(200, text="System reset to pristine state")

        return httpx.Response(404, json={"message": "No such route"})

    def _transfer(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        source, target, amount = payload["fromAccount"], payload["toAccount"], payload["amount"]
        if self.balances.get(source, 0) < amount:
            return httpx.Response(422, json={"status": 422, "message": "Insufficient funds"})

        self.balances[source] -= amount
        self.balances[target] = self.balances.get(target, 0) + amount
        txn = {
            "id": str(uuid.uuid4()),
            "idempotencyKey": request.headers["Idempotency-Key"],
            "status": "COMPLETED",
            "createdAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "fromAccount": source,
            "toAccount": target,
            "amount": amount,
            "currency": payload["currency"],
        }
        self.transactions.append(txn)
        return httpx.Response(200, json=txn)


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
async def ledger_client(fake_ledger: FakeLedger) -> AsyncGenerator[LedgerClient, None]:
    """LedgerClient wired to the fake backend"""
    client = LedgerClient(base_url=BASE_URL, transport=httpx.MockTransport(fake_ledger.handle))
    try:
        yield client
    finally:
        await client.aclose()


@pytest.fixture
def make_coordinator() -> Callable[..., ReadinessCoordinator]:
    """Coordinator factory with millisecond-scale timings"""

    def factory(probe, attempt_timeout=0.05, retry_interval=0.01, max_wait=0.3, flash_seconds=0.05):
        return ReadinessCoordinator(
            probe,
            attempt_timeout=attempt_timeout,
            retry_interval=retry_interval,
            max_wait=max_wait,
            notices=NoticeBoard(flash_seconds=flash_seconds),
        )

    return factory


@pytest.fixture
async def ready_coordinator(make_coordinator) -> AsyncGenerator[ReadinessCoordinator, None]:
    """Coordinator that has already confirmed readiness"""

    async def healthy(timeout: float) -> HealthStatus:
        return HealthStatus(status="ok")

    coordinator = make_coordinator(healthy)
    await coordinator.ensure_ready()
    try:
        yield coordinator
    finally:
        await coordinator.close()


def build_session(fake_ledger: FakeLedger, max_wait: float = 0.3) -> DemoSession:
    """Console session against the fake backend with millisecond-scale timings"""
    client = LedgerClient(base_url=BASE_URL, transport=httpx.MockTransport(fake_ledger.handle))
    coordinator = ReadinessCoordinator(
        client.probe_health,
        attempt_timeout=0.05,
        retry_interval=0.01,
        max_wait=max_wait,
        notices=NoticeBoard(flash_seconds=0.05),
    )
    # Long interval: tests drive refreshes through user actions
    poller = DashboardPoller(client, coordinator, interval=60, highlight_seconds=0.05)
    return DemoSession(client=client, coordinator=coordinator, poller=poller)


@pytest.fixture
def console_factory(fake_ledger: FakeLedger) -> Generator[Callable[..., TestClient], None, None]:
    """Start console apps (lifespan included) and shut them down after the test"""
    with ExitStack() as stack:

        def factory(max_wait: float = 0.3) -> TestClient:
            app = create_app(session_factory=lambda: build_session(fake_ledger, max_wait=max_wait))
            return stack.enter_context(TestClient(app))

        yield factory


@pytest.fixture
def client(console_factory) -> TestClient:
    """Console test client against a healthy fake backend"""
    return console_factory()


@pytest.fixture
def make_session(fake_ledger: FakeLedger) -> Callable[..., DemoSession]:
    """Session factory bound to the fake backend"""
    return lambda max_wait=0.3: build_session(fake_ledger, max_wait=max_wait)


@pytest.fixture
def wait_for_dashboard() -> Callable[..., Dict[str, Any]]:
    """
    Poll GET /v1/dashboard until `predicate` holds or `timeout` elapses.

    User actions refresh the dashboard in the background, so its view
    catches up shortly after the action's response.
    """

    def wait(client: TestClient, predicate: Callable[[Dict[str, Any]], bool], timeout: float = 2.0) -> Dict[str, Any]:
        deadline = time.monotonic() + timeout
        while True:
            data = client.get("/v1/dashboard").json()
            if predicate(data) or time.monotonic() > deadline:
                return data
            time.sleep(0.01)

    return wait
