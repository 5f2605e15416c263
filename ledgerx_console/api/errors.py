"""Translation of domain failures into HTTP responses"""

import logging
from fastapi import HTTPException

from ledgerx_console.domain.exceptions import (
    BackendUnavailableError,
    DomainException,
    InvalidTransferError,
    LedgerApiError,
)


def to_http_exception(error: DomainException, request_id: str) -> HTTPException:
    """
    Map a domain failure to the status the console answers with.

    LedgerApiError keeps the upstream status (502 when there was none, i.e.
    the network failed) so 409 and 422 reach the browser unchanged.
    """
    if isinstance(error, BackendUnavailableError):
        logging.warning(f"Backend unavailable: {error.message}", extra={"request_id": request_id})
        return HTTPException(status_code=503, detail={"code": "BACKEND_UNAVAILABLE", "message": error.message})

    if isinstance(error, InvalidTransferError):
        return HTTPException(status_code=400, detail={"code": "INVALID_TRANSFER", "message": str(error)})

    if isinstance(error, LedgerApiError):
        logging.warning(
            f"LedgerX error: {error.message}",
            extra={"request_id": request_id, "code": error.code.value, "upstream_status": error.status},
        )
        return HTTPException(
            status_code=error.status or 502,
            detail={"code": error.code.value, "message": error.message},
        )

    logging.error(f"Unexpected domain error: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")
