"""
FastAPI application entry point for the B2B ordering portal.

This module initializes the FastAPI app with middleware, sessions, rate
limiting, logging, and registers all API routers.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from portal.config import settings
from portal.core.limiter import limiter
from portal.database import create_database
from portal.exceptions import PortalError
from portal.routers import addresses, admin, auth, orders, products
from portal.services.notification_service import NotificationDispatcher, NotificationSender

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Initializing database...")
    db = create_database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    db.create_schema()
    if settings.SEED_DEFAULT_DATA:
        db.seed(settings.DEFAULT_ADMIN_USERNAME, settings.DEFAULT_ADMIN_PASSWORD)
    app.state.db = db
    app.state.notifier = NotificationDispatcher(NotificationSender())
    logger.info(f"Database initialized successfully ({db.backend})")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await app.state.notifier.drain()
    db.dispose()


# Create FastAPI app
app = FastAPI(
    title="Think Body Japan B2B Ordering API",
    description="Wholesale ordering portal for business customers",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    # Plain function: SlowAPIMiddleware calls this handler without awaiting it
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"message": "Too many requests. Please try again later."},
    )


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal Server Error"},
    )


# Rate limiting for every route (login endpoints carry a stricter limit)
app.add_middleware(SlowAPIMiddleware)

# Signed cookie holding only the server-side session id
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add GZip compression
app.add_middleware(GZipMiddleware, minimum_size=1000)

# Register routers
prefix = settings.API_PREFIX
app.include_router(auth.router, prefix=prefix, tags=["auth"])
app.include_router(products.router, prefix=f"{prefix}/products", tags=["products"])
app.include_router(addresses.router, prefix=f"{prefix}/shipping-addresses", tags=["shipping-addresses"])
app.include_router(orders.router, prefix=f"{prefix}/orders", tags=["orders"])
app.include_router(admin.router, prefix=f"{prefix}/admin", tags=["admin"])


@app.get("/")
async def root():
    """Root endpoint for health check."""
    return {"message": "Think Body Japan B2B Ordering API", "status": "running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "portal.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
