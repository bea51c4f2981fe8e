"""通用 Response 契约：成功 {ok: true, data}，失败 {ok: false, message}。"""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorDetail(BaseModel):
    """统一错误响应体。"""

    ok: Literal[False] = False
    message: str = Field(..., description="可展示给用户的信息")
    code: str = Field("", description="错误种类，如 not_found / out_of_endpoint")
    request_id: str = Field("", description="便于日志关联的请求 ID")


class ApiResponse(BaseModel, Generic[T]):
    """统一成功响应体。"""

    ok: Literal[True] = True
    data: T | None = Field(None, description="业务数据")
    request_id: str = Field("", description="请求 ID")
