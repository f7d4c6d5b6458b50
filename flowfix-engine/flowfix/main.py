"""FastAPI application entry point."""
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowfix import __version__
from flowfix.api import normalize
from flowfix.config import get_settings
from flowfix.log import configure_logging

settings = get_settings()

configure_logging(
    level="DEBUG" if settings.debug else settings.log_level,
    json_logs=settings.log_json,
)

logger = structlog.get_logger()

app = FastAPI(
    title=settings.app_name,
    description="Repairs LLM-generated n8n workflows into importable JSON",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware for the browser extension and web builder
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(normalize.router, prefix="/api", tags=["normalization"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
    }


@app.on_event("startup")
async def startup_event():
    """Application startup handler."""
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        debug=settings.debug,
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown handler."""
    logger.info("application_shutdown")
