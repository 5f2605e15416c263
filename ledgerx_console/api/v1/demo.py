"""POST /v1/demo/reset - restore demo wallets"""

from fastapi import APIRouter, Depends, Request

from ledgerx_console.api.dependencies import get_request_id, get_session
from ledgerx_console.api.errors import to_http_exception
from ledgerx_console.domain.exceptions import DomainException
from ledgerx_console.orchestration.session import DemoSession

router = APIRouter()


@router.post("/demo/reset")
async def reset_demo(request: Request, session: DemoSession = Depends(get_session)):
    try:
        await session.reset()
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return {"status": "reset"}
