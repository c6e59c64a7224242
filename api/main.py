"""
FastAPI Application - Business Ranking Service API
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from database import init_engine, close_engine, create_tables
from database.init import run_migrations
from utils import logger, init_logging
from .routes import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    init_logging(app_name="api")
    logger.info("Starting API server")

    try:
        run_migrations()
    except Exception as e:
        # Fall back to metadata create_all so a fresh dev database still works
        logger.error(f"Migration failed: {e}")
        await create_tables()

    await init_engine()
    yield
    logger.info("Shutting down API server")
    await close_engine()


app = FastAPI(
    title="Business Ranking Service",
    description="Ranked business listings and review-based reputation metrics for the discovery feed",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routes
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Business Ranking Service",
        "version": "1.0.0",
        "status": "running"
    }
