"""端点目录树、端点列表、文件哈希等接口的数据模型。"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class TreeNode(BaseModel):
    """目录树中的一个条目；文件没有 children，目录没有 size / last_modified。"""

    name: str
    is_dir: bool
    size: int = Field(0, ge=0, description="字节数，仅文件有效")
    last_modified: datetime | None = Field(None, description="最后修改时间（UTC），目录为空")
    children: dict[str, TreeNode] = Field(default_factory=dict)


class EndpointTreeResponse(BaseModel):
    tree: dict[str, TreeNode]


class EndpointListResponse(BaseModel):
    endpoints: list[str]


class FileHashResponse(BaseModel):
    hash: str = Field(..., description="XXH64 十六进制摘要")
    file: str = Field(..., description="请求时传入的文件描述符")


class UploadResponse(BaseModel):
    """上传成功时返回空对象。"""
