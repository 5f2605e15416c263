"""Domain-specific exceptions"""

from enum import Enum
from typing import Any, Optional


DEFAULT_UNAVAILABLE_MESSAGE = "Backend unavailable. Please try again later."


class ErrorCode(str, Enum):
    """Categories a failed LedgerX call is classified into"""

    CONFLICT = "CONFLICT"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    HTTP_ERROR = "HTTP_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class LedgerApiError(DomainException):
    """
    LedgerX API call failed.

    `status` and `details` carry the raw upstream status and body for
    diagnostics; branch on `code` only.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        status: Optional[int] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.details = details

    def __repr__(self) -> str:
        return f"LedgerApiError(code={self.code.value}, status={self.status}, message={self.message!r})"


class BackendUnavailableError(DomainException):
    """LedgerX never became ready during this session"""

    def __init__(self, message: str = DEFAULT_UNAVAILABLE_MESSAGE):
        super().__init__(message)
        self.message = message


class InvalidTransferError(DomainException):
    """Transfer request rejected locally before reaching the network"""

    pass
