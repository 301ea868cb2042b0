"""
Main application entry point - FastAPI app instance and configuration.
This is where the ASGI application is created and configured.
Run with: uvicorn calsync.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from calsync.core.config import settings
from calsync.core.errors import CalsyncError, NotConnectedError, StoreError
from calsync.routers import calendars

# ---------------------------------------------------------------------------
# LOGGING
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("calsync.main")

# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
# The frontend runs on its own origin and calls the API directly.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# ERROR HANDLERS
# ---------------------------------------------------------------------------
# Errors bubble out of the services unchanged; here they become
# {"error": message} responses. Nothing is retried.

@app.exception_handler(NotConnectedError)
async def not_connected_handler(request: Request, exc: NotConnectedError):
    return JSONResponse(status_code=404, content={"error": "Not connected"})


@app.exception_handler(CalsyncError)
async def calsync_error_handler(request: Request, exc: CalsyncError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path} store failure: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# calendars.router: /api/calendars connect, callback, sync, disconnect
app.include_router(calendars.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/", tags=["health"])
def health_check():
    """
    Simple health check endpoint.

    Does NOT check database connectivity.

    Returns:
        {"status": "Backend OK"}
    """
    return {"status": "Backend OK"}
