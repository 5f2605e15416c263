"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from ledgerx_console.orchestration.session import DemoSession


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_session(request: Request) -> DemoSession:
    """Provide the console session started by the application lifespan"""
    return request.app.state.session
