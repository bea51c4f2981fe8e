"""全局依赖：鉴权、Request ID、配置与端点表。"""

from uuid import uuid4

from fastapi import Request

from filesync.core.config import get_settings
from filesync.core.endpoints import get_endpoint_registry
from filesync.core.security import verify_bearer_token
from filesync.observability.logging import set_request_id

# 鉴权：直接复用 security 中的依赖
require_token = verify_bearer_token


async def get_request_id(request: Request) -> str:
    """优先复用中间件已生成的 request_id，否则从请求头获取或生成，并注入上下文。"""
    rid = (
        getattr(request.state, "request_id", None)
        or request.headers.get("X-Request-ID")
        or str(uuid4())
    )
    set_request_id(rid)
    return rid


__all__ = ["require_token", "get_request_id", "get_settings", "get_endpoint_registry"]
