"""FastAPI application for the finditfast search API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finditfast.core.config import settings
from finditfast.web.dependencies import get_search_engine
from finditfast.web.routers import search, stores

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.preload_on_startup:
        warmed = await get_search_engine().preload_popular_searches()
        logger.info("Preloaded %d popular searches", warmed)
    yield


app = FastAPI(
    title="finditfast API",
    description="Find which nearby store carries an item, and where it is on the shelf",
    version=settings.version,
    lifespan=lifespan,
)

# CORS middleware for the web and mobile dev servers
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(search.router, prefix="/api/search", tags=["Search"])
app.include_router(stores.router, prefix="/api/stores", tags=["Stores"])


@app.get("/")
async def root():
    """Root endpoint - API info."""
    return {
        "name": "finditfast API",
        "version": settings.version,
        "docs": "/docs",
        "health": "/api/health",
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
