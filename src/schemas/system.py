"""
System-related API models.

This module contains models for system status and monitoring.
"""

from typing import Any, Dict

from pydantic import BaseModel


class SystemStatus(BaseModel):
    """System status information"""

    status: str
    uptime: float
    sessions: Dict[str, Any]
    blobs: Dict[str, Any]
