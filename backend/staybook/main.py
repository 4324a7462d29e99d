"""Staybook: FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from staybook.api.errors import register_error_handlers
from staybook.api.v1.auth import router as auth_router
from staybook.api.v1.bookings import router as bookings_router
from staybook.api.v1.messages import router as messages_router
from staybook.api.v1.properties import router as properties_router
from staybook.api.v1.reviews import router as reviews_router
from staybook.api.v1.saved import compare_router, wishlist_router
from staybook.api.v1.users import router as users_router
from staybook.config import settings

# Configure root logger so all staybook.* loggers output to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    yield
    # Shutdown: dispose engine connections
    from staybook.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Short-term rental marketplace: listings, bookings, reviews and guest/host messaging.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(properties_router)
app.include_router(bookings_router)
app.include_router(reviews_router)
app.include_router(messages_router)
app.include_router(wishlist_router)
app.include_router(compare_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
