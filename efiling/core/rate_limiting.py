"""
Rate limiting configuration
slowapi limiter keyed by client address; storage is in-memory locally and
Redis in production (RATE_LIMIT_STORAGE_URL=redis://...)
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from efiling.core.config import settings
from efiling.core.exceptions import RateLimited
from efiling.core.metrics import record_rate_limited

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URL,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Per-endpoint rules
workflow_action_limits = settings.WORKFLOW_ACTION_RATE_LIMIT


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render limit violations in the common error shape"""
    logger.warning(
        f"Rate limit exceeded - Path: {request.url.path}, "
        f"Client: {get_remote_address(request)}, Limit: {exc.detail}"
    )
    record_rate_limited(request.url.path)
    error = RateLimited()
    response = JSONResponse(status_code=error.status_code, content={"error": error.message})
    return request.app.state.limiter._inject_headers(
        response, request.state.view_rate_limit
    )
