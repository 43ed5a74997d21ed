# src/asirnet/main.py
"""Main entry point for the Asirnet application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from asirnet.api.v1 import (
    auth_router,
    interactions_router,
    posts_router,
    users_router,
)
from asirnet.core.errors import AsirnetError
from asirnet.core.logging import configure_logging
from asirnet.core.settings import settings
from asirnet.services.keepalive import KeepAliveWorker
from asirnet.stores.factory import build_store_provider

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Asirnet API",
    description="Minimal social network: users, posts, reactions and comments",
    version=settings.app_version,
)
app.state.store_provider = build_store_provider(settings)
app.state.keepalive_worker = None

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers, both at the legacy root paths and under /api/v1
for prefix in ("", "/api/v1"):
    app.include_router(auth_router, prefix=prefix)
    app.include_router(users_router, prefix=prefix)
    app.include_router(posts_router, prefix=prefix)
    app.include_router(interactions_router, prefix=prefix)


@app.exception_handler(AsirnetError)
async def asirnet_error_handler(request: Request, exc: AsirnetError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = sorted(
        {".".join(str(part) for part in error["loc"] if part != "body") for error in exc.errors()}
    )
    return JSONResponse(
        status_code=400,
        content={"error": f"Missing or invalid field: {', '.join(fields)}"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    app.state.store_provider.prepare()
    if settings.keepalive_enabled and settings.keepalive_urls:
        worker = KeepAliveWorker()
        await worker.start()
        app.state.keepalive_worker = worker


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: KeepAliveWorker | None = getattr(app.state, "keepalive_worker", None)
    if worker:
        await worker.stop()
        app.state.keepalive_worker = None


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("asirnet.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
