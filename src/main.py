"""
File Tools - Main FastAPI Application
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Add parent directory to path
sys.path.append(str(Path(__file__).parent))

from api.exceptions import register_exception_handlers  # noqa: E402

# Import routers  # noqa: E402
from api.routers import blob, image, palette, pdf, session, system  # noqa: E402

# Import configuration  # noqa: E402
from common.constants import SystemConstants  # noqa: E402
from config import get_settings  # noqa: E402

# Import core components  # noqa: E402
from core.session_manager import SessionManager  # noqa: E402

# Get configuration
settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.system.log_level),
    format=SystemConstants.LOG_FORMAT,
)
logger = logging.getLogger(__name__)

# Image codecs log at debug level on every call
logging.getLogger("PIL").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    # Startup
    logger.info("Starting File Tools server...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.system.debug}")

    session_manager = SessionManager(max_sessions=settings.session.max_sessions)
    logger.info("Session manager initialized")

    # Store managers in app state for access by routers
    app.state.session_manager = session_manager
    app.state.debug = settings.system.debug

    yield

    # Shutdown
    logger.info("Shutting down File Tools server...")
    session_manager.cleanup()
    logger.info("Server shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="File Tools",
    description="Image and PDF utilities: resize, crop, rotate, watermark, convert, "
    "compress, palette extraction, PDF merge, split and conversion",
    version="1.0.0",
    lifespan=lifespan,
)

if settings.api.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Register exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(session.router, prefix="/api/session", tags=["Session"])
app.include_router(blob.router, prefix="/api/blob", tags=["Blob"])
app.include_router(image.router, prefix="/api/image", tags=["Image"])
app.include_router(palette.router, prefix="/api/palette", tags=["Palette"])
app.include_router(pdf.router, prefix="/api/pdf", tags=["PDF"])
app.include_router(system.router, prefix="/api/system", tags=["System"])


# Root endpoint
@app.get("/")
async def root():
    return {
        "name": "File Tools",
        "status": "running",
        "version": "1.0.0",
        "endpoints": {
            "session": "/api/session",
            "blob": "/api/blob",
            "image": "/api/image",
            "palette": "/api/palette",
            "pdf": "/api/pdf",
            "system": "/api/system",
            "docs": "/docs",
        },
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "services": {
            "session_manager": getattr(app.state, "session_manager", None) is not None,
        },
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.system.debug,
        log_level=settings.system.log_level.lower(),
    )
