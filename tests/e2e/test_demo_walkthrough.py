"""
E2E walkthrough of a console session: wake, transfer, stress, reset.

The in-process scenario runs against the simulated LedgerX backend. The
live scenarios need a real LedgerX deployment:
    LEDGERX_E2E_URL=https://ledgerx.example.com pytest -m integration

Against a sleeping free-tier deployment the first request can take minutes.
"""

import os

import httpx
import pytest
from fastapi.testclient import TestClient

from ledgerx_console.api.main import create_app
from ledgerx_console.infrastructure.clients.ledger import LedgerClient
from ledgerx_console.orchestration.session import DemoSession

LIVE_URL = os.getenv("LEDGERX_E2E_URL")


def test_cold_backend_walkthrough(console_factory, fake_ledger, wait_for_dashboard):
    """
    Backend asleep for the first probes, then a full demo run
    Expected: actions wait for readiness and every outcome is reported
    """
    fake_ledger.health_failures = 3
    client = console_factory(max_wait=1.0)

    # Manual transfer waits for the backend to wake up
    response = client.post("/v1/transfers", json={"amount": 100})
    assert response.status_code == 200
    assert len(fake_ledger.requests_to("/health")) == 4

    status = client.get("/v1/status").json()
    assert status["state"] == "ready"
    wait_for_dashboard(client, lambda d: d["wallets"]["A"] and d["wallets"]["A"]["balance"] == 900.0)

    # Race: one lost update and one overdraft among five submissions
    fake_ledger.transfer_script = [
        None,
        httpx.Response(409, json={"message": "Concurrent update detected. Please retry."}),
        None,
        httpx.Response(422, json={"message": "Insufficient funds"}),
        None,
    ]
    summary = client.post("/v1/transfers/stress-test", json={"concurrency": 5, "amount": 10}).json()
    assert (summary["succeeded"], summary["conflicts"], summary["insufficient_funds"]) == (3, 1, 1)

    dashboard = wait_for_dashboard(client, lambda d: d["wallets"]["A"]["balance"] == 870.0)
    assert dashboard["wallets"]["A"]["balance"] == 870.0
    assert dashboard["wallets"]["B"]["balance"] == 630.0
    assert len(dashboard["transactions"]) == 4

    # Reset restores the seeded balances
    assert client.post("/v1/demo/reset").status_code == 200
    dashboard = wait_for_dashboard(client, lambda d: d["transactions"] == [])
    assert dashboard["wallets"]["A"]["balance"] == 1000.0
    assert dashboard["transactions"] == []

    # Health was settled once; later actions never probe again
    assert len(fake_ledger.requests_to("/health")) == 4


@pytest.fixture
def live_client():
    if not LIVE_URL:
        pytest.skip("LEDGERX_E2E_URL not set")

    app = create_app(session_factory=lambda: DemoSession(client=LedgerClient(base_url=LIVE_URL)))
    with TestClient(app) as client:
        yield client


@pytest.mark.integration
def test_live_manual_transfer(live_client: TestClient):
    """
    Live LedgerX: one small transfer from wallet A to wallet B
    Expected: completed transaction visible in the ledger
    """
    assert live_client.post("/v1/demo/reset").status_code == 200

    response = live_client.post("/v1/transfers", json={"amount": 1})

    assert response.status_code == 200
    transaction = response.json()
    assert transaction["status"] == "COMPLETED"

    page = live_client.get("/v1/transactions?page=0&size=20").json()
    assert transaction["id"] in [item["id"] for item in page["items"]]


@pytest.mark.integration
def test_live_stress_test(live_client: TestClient):
    """
    Live LedgerX: 50 concurrent transfers
    Expected: every submission settles as success, conflict or another error
    """
    assert live_client.post("/v1/demo/reset").status_code == 200

    response = live_client.post("/v1/transfers/stress-test", json={"concurrency": 50})

    assert response.status_code == 200
    data = response.json()
    settled = data["succeeded"] + data["conflicts"] + data["insufficient_funds"] + data["other_errors"]
    assert settled == data["requested"] == 50
    assert data["succeeded"] > 0
