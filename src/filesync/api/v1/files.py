"""文件 API。

GET /api/v1/files/{descriptor}/hash  文件摘要
GET /api/v1/files/{descriptor}       下载文件
PUT /api/v1/files/new                上传新文件（X-File-Path / X-Force / X-Recursive）

descriptor 形如 "<endpoint>/<relativePath>"。
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from filesync.api.dependencies import get_endpoint_registry, get_request_id, require_token
from filesync.core.config import Settings, get_settings
from filesync.core.endpoints import EndpointRegistry
from filesync.core.errors import ErrorKind, FileServiceError
from filesync.observability.logging import get_logger
from filesync.schemas.common import ApiResponse
from filesync.schemas.files import FileHashResponse, UploadResponse
from filesync.services.file_service import (
    create_file,
    hash_descriptor,
    iter_file,
    locate_download,
    open_download,
)


router = APIRouter(dependencies=[Depends(require_token)])
logger = get_logger(__name__)


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


@router.put(
    "/new",
    response_model=ApiResponse[UploadResponse],
    summary="上传新文件",
    description=(
        "请求体为文件原始字节。X-File-Path 指定描述符；X-Recursive: true 时自动创建父目录；"
        "X-Force: true 时允许覆盖已存在的文件（同名目录始终拒绝）。"
    ),
)
async def upload_file(
    request: Request,
    x_file_path: str | None = Header(None, alias="X-File-Path"),
    x_force: str | None = Header(None, alias="X-Force"),
    x_recursive: str | None = Header(None, alias="X-Recursive"),
    request_id: str = Depends(get_request_id),
    settings: Settings = Depends(get_settings),
    registry: EndpointRegistry = Depends(get_endpoint_registry),
) -> ApiResponse[UploadResponse]:
    if not (x_file_path or "").strip():
        raise FileServiceError(
            ErrorKind.MISSING_FIELD,
            "file path is not specified",
            "got request without X-File-Path header",
        )
    await create_file(
        registry,
        x_file_path,
        request.stream(),
        force=_flag(x_force),
        recursive=_flag(x_recursive),
        resolve_symlinks=settings.resolve_symlinks,
    )
    return ApiResponse(data=UploadResponse(), request_id=request_id)


async def _download_response(
    descriptor: str, settings: Settings, registry: EndpointRegistry
) -> StreamingResponse:
    loc = await run_in_threadpool(
        locate_download, registry, descriptor, resolve_symlinks=settings.resolve_symlinks
    )
    f = await open_download(loc.path)
    logger.info("file_download_start", endpoint=loc.endpoint, path=str(loc.path))
    return StreamingResponse(
        iter_file(f, settings.download_chunk_size),
        media_type="application/octet-stream",
    )


def _plain_file_named_hash(registry: EndpointRegistry, descriptor: str, resolve_symlinks: bool) -> bool:
    """`<descriptor>/hash` 本身是否是端点内的普通文件（此时按下载处理）。"""
    try:
        locate_download(registry, f"{descriptor}/hash", resolve_symlinks=resolve_symlinks)
    except FileServiceError:
        return False
    return True


@router.get(
    "/{descriptor:path}/hash",
    response_model=ApiResponse[FileHashResponse],
    summary="计算文件摘要（XXH64）",
    description="若 `<descriptor>/hash` 本身是一个文件，则直接下载该文件。",
)
async def get_file_hash(
    descriptor: str,
    request_id: str = Depends(get_request_id),
    settings: Settings = Depends(get_settings),
    registry: EndpointRegistry = Depends(get_endpoint_registry),
):
    if await run_in_threadpool(
        _plain_file_named_hash, registry, descriptor, settings.resolve_symlinks
    ):
        return await _download_response(f"{descriptor}/hash", settings, registry)
    result = await run_in_threadpool(
        hash_descriptor,
        registry,
        descriptor,
        max_size=settings.max_hash_size,
        resolve_symlinks=settings.resolve_symlinks,
    )
    return ApiResponse(data=result, request_id=request_id)


@router.get("/{descriptor:path}", summary="下载文件", response_class=StreamingResponse)
async def download_file(
    descriptor: str,
    settings: Settings = Depends(get_settings),
    registry: EndpointRegistry = Depends(get_endpoint_registry),
) -> StreamingResponse:
    return await _download_response(descriptor, settings, registry)
