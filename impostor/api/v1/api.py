"""
API v1 router
API v1 路由配置
"""

from fastapi import APIRouter

from impostor.api.v1.endpoints import rooms, health

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(health.router, tags=["health"])
api_router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
