"""Classification of failed LedgerX calls into typed error categories"""

import json
from typing import Any, Optional

import httpx

from ledgerx_console.domain.exceptions import ErrorCode, LedgerApiError


DEFAULT_MESSAGES = {
    ErrorCode.CONFLICT: "Transfer conflict detected from a concurrent update. Please retry.",
    ErrorCode.INSUFFICIENT_FUNDS: "Insufficient funds for this transfer. Lower the amount or change source account.",
    ErrorCode.NOT_FOUND: "Requested resource was not found.",
    ErrorCode.BAD_REQUEST: "Invalid request payload.",
    ErrorCode.NETWORK_ERROR: "Unable to reach LedgerX API. Check that the backend is running.",
}

STATUS_CODES = {
    409: ErrorCode.CONFLICT,
    422: ErrorCode.INSUFFICIENT_FUNDS,
    404: ErrorCode.NOT_FOUND,
    400: ErrorCode.BAD_REQUEST,
}


def parse_body(response: httpx.Response) -> Any:
    """
    Decode a response body without ever failing.

    Returns:
        Parsed JSON for JSON responses, raw text for anything else,
        None for an empty body
    """
    raw = response.text
    if not raw:
        return None

    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return json.loads(raw)
        except ValueError:
            return raw

    return raw


def extract_message(body: Any) -> Optional[str]:
    """Pull a human-readable message out of an error body, if it has one"""
    if not body:
        return None

    if isinstance(body, str):
        return body

    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message

    return None


def classify_response(status: int, body: Any) -> LedgerApiError:
    """
    Map a non-2xx LedgerX response to a LedgerApiError.

    409 -> CONFLICT, 422 -> INSUFFICIENT_FUNDS, 404 -> NOT_FOUND,
    400 -> BAD_REQUEST, anything else -> HTTP_ERROR. A message supplied by
    the backend wins over the default message for the code.
    """
    code = STATUS_CODES.get(status, ErrorCode.HTTP_ERROR)
    default = DEFAULT_MESSAGES.get(code, f"Request failed with HTTP {status}.")

    return LedgerApiError(
        message=extract_message(body) or default,
        code=code,
        status=status,
        details=body,
    )


def classify_transport_failure(error: httpx.RequestError) -> LedgerApiError:
    """Map a connection-level failure (refused, reset, timed out) to NETWORK_ERROR"""
    message = DEFAULT_MESSAGES[ErrorCode.NETWORK_ERROR]
    if isinstance(error, httpx.TimeoutException):
        message = "LedgerX API did not respond in time. Check that the backend is running."

    return LedgerApiError(
        message=message,
        code=ErrorCode.NETWORK_ERROR,
        status=None,
        details=repr(error),
    )
