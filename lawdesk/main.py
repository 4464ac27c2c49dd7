"""
LawDesk - Main Application Entry Point

Case management for law offices: clients, cases, tasks and documents.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from lawdesk.config import settings
from lawdesk.database import init_db, close_db
from lawdesk.rate_limit import RateLimitMiddleware
from lawdesk.sessions import MemorySessionStore
from lawdesk.routes.auth_routes import router as auth_router
from lawdesk.routes.client_routes import router as client_router
from lawdesk.routes.case_routes import router as case_router
from lawdesk.routes.task_routes import router as task_router
from lawdesk.routes.document_routes import router as document_router
from lawdesk.routes.user_routes import router as user_router
from lawdesk.routes.audit_routes import router as audit_router
from lawdesk.routes.dashboard_routes import router as dashboard_router

logger = logging.getLogger(__name__)


# =============================================================================
# STARTUP & SHUTDOWN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, storage and the session store; release them on exit."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    await init_db()
    settings.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    app.state.session_store = MemorySessionStore(settings.SESSION_EXPIRE_MINUTES * 60)

    logger.info("%s %s starting (docs at /docs)", settings.APP_NAME, settings.APP_VERSION)

    yield

    await app.state.session_store.clear()
    await close_db()
    logger.info("%s shutting down", settings.APP_NAME)


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Add rate limiting middleware
app.add_middleware(RateLimitMiddleware)

# Include routers
app.include_router(auth_router)
app.include_router(client_router)
app.include_router(case_router)
app.include_router(task_router)
app.include_router(document_router)
app.include_router(user_router)
app.include_router(audit_router)
app.include_router(dashboard_router)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed query or form parameters are client errors (400, not 422)."""
    errors = [
        {key: value for key, value in error.items() if key in ("loc", "msg", "type")}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# =============================================================================
# ROUTES
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


# =============================================================================
# RUN (for development)
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "lawdesk.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
