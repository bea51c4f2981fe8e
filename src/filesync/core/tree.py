"""端点目录树构建：递归列出目录，生成 name -> TreeNode 的嵌套结构。"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

from filesync.core.errors import ErrorKind, FileServiceError
from filesync.schemas.files import TreeNode


def build_tree(name: str, root: str | Path, max_depth: int = 0) -> TreeNode:
    """从 root 构建完整目录树，根节点名为 name。

    只下钻 scandir 报告为真实目录的条目（不跟随符号链接），因此结果一定是树。
    任意一级列目录或读元数据失败都会中止整个构建，不返回部分结果。
    max_depth > 0 时超过该深度的目录只列出自身、children 为空；0 表示不限制。
    """
    return TreeNode(name=name, is_dir=True, children=_list_children(Path(root), 1, max_depth))


def _list_children(directory: Path, depth: int, max_depth: int) -> dict[str, TreeNode]:
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as exc:
        raise FileServiceError(
            ErrorKind.FILESYSTEM_ERROR,
            log_message=f"error listing dir '{directory}': {exc}",
        ) from exc

    children: dict[str, TreeNode] = {}
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                descend = not max_depth or depth < max_depth
                grandchildren = (
                    _list_children(Path(entry.path), depth + 1, max_depth) if descend else {}
                )
                children[entry.name] = TreeNode(name=entry.name, is_dir=True, children=grandchildren)
                continue
            info = entry.stat(follow_symlinks=False)
        except OSError as exc:
            raise FileServiceError(
                ErrorKind.FILESYSTEM_ERROR,
                log_message=f"error getting fileinfo of '{entry.path}': {exc}",
            ) from exc
        children[entry.name] = TreeNode(
            name=entry.name,
            is_dir=False,
            size=info.st_size,
            last_modified=datetime.fromtimestamp(info.st_mtime, tz=timezone.utc),
        )
    return children
