"""端点 API。

GET /api/v1/endpoints             列出全部端点名
GET /api/v1/endpoints/{endpoint}  返回端点目录树
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from filesync.api.dependencies import get_endpoint_registry, get_request_id, require_token
from filesync.core.config import Settings, get_settings
from filesync.core.endpoints import EndpointRegistry
from filesync.schemas.common import ApiResponse
from filesync.schemas.files import EndpointListResponse, EndpointTreeResponse
from filesync.services.endpoint_service import get_endpoint_tree, list_endpoints


router = APIRouter(dependencies=[Depends(require_token)])


@router.get(
    "",
    response_model=ApiResponse[EndpointListResponse],
    summary="列出全部端点",
)
async def get_all_endpoints(
    request_id: str = Depends(get_request_id),
    registry: EndpointRegistry = Depends(get_endpoint_registry),
) -> ApiResponse[EndpointListResponse]:
    return ApiResponse(
        data=EndpointListResponse(endpoints=list_endpoints(registry)),
        request_id=request_id,
    )


@router.get(
    "/{endpoint}",
    response_model=ApiResponse[EndpointTreeResponse],
    summary="获取端点目录树",
    description="递归列出端点根目录，任意子目录读取失败则整体失败，不返回部分目录树。",
)
async def get_endpoint(
    endpoint: str,
    request_id: str = Depends(get_request_id),
    settings: Settings = Depends(get_settings),
    registry: EndpointRegistry = Depends(get_endpoint_registry),
) -> ApiResponse[EndpointTreeResponse]:
    # 目录遍历是阻塞 IO，放到线程池
    tree = await run_in_threadpool(
        get_endpoint_tree, registry, endpoint, max_depth=settings.max_tree_depth
    )
    return ApiResponse(data=EndpointTreeResponse(tree=tree), request_id=request_id)
