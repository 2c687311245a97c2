"""
System API Router - Status and configuration
"""

import logging
import time
from datetime import datetime

from fastapi import APIRouter, Depends

from api.dependencies import get_config, get_session_manager
from api.exceptions import safe_endpoint
from schemas import SystemStatus

logger = logging.getLogger(__name__)

router = APIRouter()

# Track start time
START_TIME = time.time()


@router.get("/status")
@safe_endpoint
async def get_status(session_manager=Depends(get_session_manager)) -> SystemStatus:
    """Get session and blob statistics"""
    stats = session_manager.get_stats()

    return SystemStatus(
        status="healthy",
        uptime=time.time() - START_TIME,
        sessions={
            "total": stats["total_sessions"],
            "max": stats["max_sessions"],
            "processing": stats["processing_sessions"],
        },
        blobs={
            "live": stats["live_blobs"],
            "created": stats["created_blobs"],
            "released": stats["released_blobs"],
            "total_size_mb": stats["total_size_mb"],
        },
    )


@router.get("/config")
@safe_endpoint
async def get_configuration(settings=Depends(get_config)) -> dict:
    """Get current configuration"""
    return settings.to_dict()


@router.get("/health")
async def health_check() -> dict:
    """Simple health check"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}
