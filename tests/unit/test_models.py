"""Unit tests for domain models"""

import math
import pytest
from ledgerx_console.domain.exceptions import InvalidTransferError
from ledgerx_console.domain.models import BatchSummary, HealthStatus, TransferRequest


def _request(amount) -> TransferRequest:
    return TransferRequest(from_account="ACC-A-001", to_account="ACC-B-001", amount=amount, currency="USD")


@pytest.mark.parametrize("amount", [0, -1, -0.01, math.inf, math.nan, "25", None, True])
def test_transfer_request_rejects_bad_amounts(amount):
    with pytest.raises(InvalidTransferError):
        _request(amount).validate()


def test_transfer_request_accepts_positive_amount():
    _request(0.01).validate()
    _request(25).validate()


def test_transfer_request_requires_accounts():
    request = TransferRequest(from_account="", to_account="ACC-B-001", amount=1, currency="USD")

    with pytest.raises(InvalidTransferError):
        request.validate()


def test_transfer_request_payload_uses_wire_names():
    assert _request(1.5).to_payload() == {
        "fromAccount": "ACC-A-001",
        "toAccount": "ACC-B-001",
        "amount": 1.5,
        "currency": "USD",
    }


@pytest.mark.parametrize("status, ok", [("ok", True), ("UP", True), ("DOWN", False), ("unknown", False)])
def test_health_status_ok(status, ok):
    assert HealthStatus(status=status).ok is ok


def test_batch_summary_describe():
    summary = BatchSummary(requested=5, succeeded=3, conflicts=1, insufficient_funds=1, duration_ms=42)

    assert summary.settled == 5
    assert summary.describe() == "3/5 succeeded in 42ms. 1 conflicts, 1 insufficient funds."


def test_batch_summary_describe_mentions_other_errors():
    summary = BatchSummary(requested=2, succeeded=1, other_errors=1, duration_ms=7)

    assert summary.describe().endswith(", 1 other errors.")
