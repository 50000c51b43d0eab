"""
KW&SC E-Filing Workflow API - Main FastAPI Application
Routes files through workflow templates with role-gated stages and SLAs
"""

import logging
from datetime import datetime

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from efiling.api.v1.api import api_router
from efiling.core.config import settings
from efiling.core.metrics import CONTENT_TYPE_LATEST, MetricsMiddleware, get_metrics
from efiling.core.middleware import AuditMiddleware, ErrorHandlingMiddleware
from efiling.core.rate_limiting import limiter, rate_limit_exceeded_handler

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title=settings.APP_NAME,
    description="Workflow and stage-transition engine for KW&SC e-filing",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    debug=settings.DEBUG,
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Every error leaves the API as {"error": <message>}"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Default per-client limits (only in production/staging)
if settings.ENVIRONMENT in ["production", "staging"]:
    app.add_middleware(SlowAPIMiddleware)

if settings.PROMETHEUS_METRICS_ENABLED:
    app.add_middleware(MetricsMiddleware)

app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(AuditMiddleware)

app.include_router(api_router, prefix="/v1/efiling")


@app.get("/health")
async def health_check():
    """Basic health check endpoint for load balancers and monitoring"""
    return {
        "status": "healthy",
        "service": "kwsc-efiling-api",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.utcnow().isoformat(),
    }


@app.get("/metrics")
async def metrics():
    """Prometheus scrape endpoint"""
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)


if __name__ == "__main__":
    uvicorn.run(
        "efiling.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
