"""端点领域服务：列出全部端点、构建某个端点的目录树。"""

from __future__ import annotations

import stat
import time
from pathlib import Path

from filesync.core.endpoints import EndpointRegistry
from filesync.core.errors import ErrorKind, FileServiceError
from filesync.core.tree import build_tree
from filesync.observability.metrics import tree_build_seconds
from filesync.schemas.files import TreeNode


def list_endpoints(registry: EndpointRegistry) -> list[str]:
    return registry.names()


def get_endpoint_tree(
    registry: EndpointRegistry, endpoint: str | None, *, max_depth: int = 0
) -> dict[str, TreeNode]:
    """返回 {根目录名: TreeNode}，根目录名取端点路径的最后一级。"""
    name = (endpoint or "").strip()
    if not name:
        raise FileServiceError(ErrorKind.MISSING_FIELD, "endpoint is empty")

    root = Path(registry.root_of(name))
    try:
        info = root.stat()
    except OSError as exc:
        raise FileServiceError(
            ErrorKind.FILESYSTEM_ERROR,
            log_message=f"error stating endpoint path '{root}': {exc}",
        ) from exc
    if not stat.S_ISDIR(info.st_mode):
        raise FileServiceError(ErrorKind.NOT_A_DIRECTORY, log_message=f"endpoint '{root}' is not a dir")

    display_name = root.name or name
    start = time.perf_counter()
    tree = build_tree(display_name, root, max_depth)
    tree_build_seconds.observe(time.perf_counter() - start)
    return {display_name: tree}
