"""API v1 路由聚合。"""

from fastapi import APIRouter

from filesync.api.v1 import endpoints, files

api_router = APIRouter(prefix="/api/v1", tags=["v1"])

api_router.include_router(endpoints.router, prefix="/endpoints", tags=["endpoints"])
api_router.include_router(files.router, prefix="/files", tags=["files"])
