"""Health check routes"""
from fastapi import APIRouter
import logging

from core.dependencies import get_tool_registry

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check"""
    try:
        tools = len(get_tool_registry().list_tools())
    except RuntimeError as e:
        logger.error(f"Health check: {e}")
        return {"status": "degraded", "service": "workspace-agent", "tools": 0}
    return {"status": "ok", "service": "workspace-agent", "tools": tools}
