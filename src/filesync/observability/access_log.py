"""HTTP 访问日志中间件：记录请求开始/结束、耗时与状态码；JSON 请求体脱敏后截断预览。

文件上传/下载的二进制内容不会被读取或写入日志。
"""

import json
import time
from typing import Any

from fastapi import Request
from starlette.requests import Request as StarletteRequest

from filesync.observability.logging import get_logger

logger = get_logger(__name__)

# 请求体日志最大长度（字符），超出截断
MAX_BODY_LOG_LEN = 2048
# 需脱敏的键名（不区分大小写）
SENSITIVE_KEYS = frozenset({"password", "api_key", "apikey", "secret", "token", "authorization"})


def _mask_sensitive(obj: Any) -> Any:
    """递归脱敏：将敏感字段值替换为 ***。"""
    if isinstance(obj, dict):
        return {k: "***" if (k and k.lower() in SENSITIVE_KEYS) else _mask_sensitive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_mask_sensitive(i) for i in obj]
    return obj


def _truncate(s: str, max_len: int = MAX_BODY_LOG_LEN) -> str:
    if len(s) <= max_len:
        return s
    return s[:max_len] + "...[truncated]"


def _is_json(request: Request) -> bool:
    return request.headers.get("content-type", "").split(";")[0].strip() == "application/json"


async def _json_body_for_log(request: Request) -> tuple[str | None, Request]:
    """
    仅对 JSON 请求体读取并返回 (preview, new_request)；new_request 会重放已缓存的 body。
    其余请求（包括文件上传的原始字节流）不读取 body，原样返回 request。
    """
    if request.method not in ("POST", "PUT", "PATCH") or not _is_json(request):
        return None, request
    body_bytes = await request.body()

    async def receive():
        return {"type": "http.request", "body": body_bytes, "more_body": False}

    new_request = StarletteRequest(request.scope, receive)
    text = body_bytes.decode("utf-8", errors="replace").strip()
    if not text:
        return None, new_request
    try:
        preview = json.dumps(_mask_sensitive(json.loads(text)), ensure_ascii=False, default=str)
    except json.JSONDecodeError:
        preview = text
    return _truncate(preview), new_request


async def access_log_middleware(request: Request, call_next):
    """统一访问日志：请求开始、结束（含状态码与耗时）。"""
    body_preview, req_to_call = await _json_body_for_log(request)
    query_params = dict(req_to_call.query_params) if req_to_call.query_params else None

    logger.info(
        "http_request_start",
        method=req_to_call.method,
        path=req_to_call.url.path,
        query=query_params,
        body_preview=body_preview,
        content_length=req_to_call.headers.get("content-length"),
    )

    start = time.perf_counter()
    response = await call_next(req_to_call)
    duration_ms = round((time.perf_counter() - start) * 1000, 2)

    logger.info(
        "http_request_finish",
        method=req_to_call.method,
        path=req_to_call.url.path,
        status_code=response.status_code,
        duration_ms=duration_ms,
    )
    return response
