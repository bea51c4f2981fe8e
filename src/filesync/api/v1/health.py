"""健康检查：/health/live（存活）、/health/ready（就绪）。"""

from fastapi import APIRouter, Depends

from filesync.api.dependencies import get_endpoint_registry, get_request_id
from filesync.core.config import Settings, get_settings
from filesync.core.endpoints import EndpointRegistry
from filesync.schemas.common import ApiResponse

router = APIRouter()


@router.get("/live")
async def liveness() -> dict[str, str]:
    """K8s liveness：仅校验进程存活。"""
    return {"status": "ok"}


@router.get("/ready", response_model=ApiResponse[dict])
async def readiness(
    request_id: str = Depends(get_request_id),
    settings: Settings = Depends(get_settings),
    registry: EndpointRegistry = Depends(get_endpoint_registry),
) -> ApiResponse[dict]:
    """K8s readiness：端点表已加载即就绪，返回环境与端点数量。"""
    return ApiResponse(
        data={"env": settings.env, "endpoints": len(registry)},
        request_id=request_id,
    )
