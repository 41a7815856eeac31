"""
Health check endpoints
健康检查端点
"""

from fastapi import APIRouter

from impostor import __version__
from impostor.core.store import store_health_check
from impostor.services.words import list_categories

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint
    基础健康检查端点
    """
    store_status = await store_health_check()
    return {
        "status": "healthy" if store_status["status"] == "healthy" else "degraded",
        "service": "impostor-word-game",
        "version": __version__,
        "store": store_status
    }


@router.get("/categories")
async def categories():
    """可选词汇类别"""
    return {"categories": list_categories()}
