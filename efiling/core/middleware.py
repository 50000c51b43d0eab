"""
Custom middleware for request auditing and error handling
"""

import logging
import time
import uuid
from typing import Callable

import anyio
from fastapi import HTTPException, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs every request with a request id and timing headers"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        logger.info(
            f"Request started - ID: {request_id}, Method: {request.method}, "
            f"Path: {request.url.path}, Client: {request.client.host if request.client else 'unknown'}"
        )

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"Request completed - ID: {request_id}, Status: {response.status_code}, "
            f"Time: {process_time:.3f}s"
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(process_time)
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turns unexpected exceptions into a structured 500 without leaking details"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            if isinstance(exc, HTTPException):
                logger.debug(
                    f"HTTPException reached middleware: {exc.status_code} - {exc.detail}"
                )
                raise

            # Client disconnects are not server errors
            if isinstance(exc, (anyio.EndOfStream, anyio.WouldBlock)):
                logger.debug(f"Client connection issue ignored: {type(exc).__name__}")
                raise

            request_id = getattr(request.state, "request_id", str(uuid.uuid4()))
            logger.error(
                f"Unhandled server exception - Request ID: {request_id}, Error: {str(exc)}",
                exc_info=True,
            )

            return JSONResponse(
                status_code=500,
                content={
                    "error": "An internal server error occurred.",
                    "request_id": request_id,
                },
            )
