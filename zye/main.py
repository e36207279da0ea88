"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- Routes
- Middleware (logging, CORS)
- Rate limiting
- Startup and shutdown hooks (logging, link store tables, engine)

Run locally with:
    uvicorn zye.main:app --reload
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from zye.api import endpoints
from zye.core.logging import initialize_logging
from zye.core.rate_limit import limiter
from zye.core.setting import settings
from zye.db.session import create_tables, dispose_engine
from zye.middleware.logging import add_logging_middleware

app = FastAPI(
    title="zye.me Short Links",
    description="Short-link resolution with password gates, expiry and social previews",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

add_logging_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# Health endpoint defined before router to match before catch-all route
@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns:
        Health status of the service
    """
    return {"status": "healthy"}


app.include_router(endpoints.router, tags=["Short Links"])


@app.on_event("startup")
async def startup_event():
    """Configure logging and make sure the link store is ready."""
    initialize_logging()
    if settings.AUTO_CREATE_TABLES:
        await create_tables()


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    await dispose_engine()
