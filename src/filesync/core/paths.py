"""文件描述符解析与端点根目录隔离（防目录穿越）。"""

from __future__ import annotations

import os
from typing import NamedTuple

from filesync.core.errors import ErrorKind, FileServiceError

_PARENT = os.pardir
_PARENT_PREFIX = os.pardir + os.sep


class PathDescriptor(NamedTuple):
    endpoint: str
    relative_path: str


def resolve_descriptor(descriptor: str | None) -> PathDescriptor:
    """将 "<endpoint>/<relativePath>" 拆为端点名与相对路径。

    只按第一个 "/" 拆分，相对路径中可继续包含分隔符；不访问文件系统，
    也不处理 "." / ".."，这部分交给 is_contained。
    """
    raw = (descriptor or "").strip()
    if not raw:
        raise FileServiceError(ErrorKind.MISSING_FIELD, "file is empty", "descriptor is empty")

    endpoint, sep, relative_path = raw.partition("/")
    endpoint = endpoint.strip()
    relative_path = relative_path.strip()
    if not sep or not endpoint:
        raise FileServiceError(
            ErrorKind.MALFORMED_DESCRIPTOR,
            log_message=f"endpoint is empty in descriptor '{raw}'",
        )
    if not relative_path:
        raise FileServiceError(
            ErrorKind.MALFORMED_DESCRIPTOR,
            log_message=f"file path is empty in descriptor '{raw}'",
        )
    return PathDescriptor(endpoint, relative_path)


def _lexically_contained(root: str, candidate: str) -> bool:
    try:
        rel = os.path.relpath(candidate, root)
    except ValueError as exc:
        # Windows 下跨盘符无法计算相对路径
        raise FileServiceError(
            ErrorKind.FILESYSTEM_ERROR,
            log_message=f"cannot relativize '{candidate}' against '{root}': {exc}",
        ) from exc
    return rel != _PARENT and not rel.startswith(_PARENT_PREFIX)


def is_contained(root: str, candidate: str, *, resolve_symlinks: bool = False) -> bool:
    """判断 candidate 是否位于 root 之内。

    默认只做词法上的相对路径计算，两个路径都不需要存在；符号链接不会被解析，
    指向根目录外的链接会被判定为“在内”。resolve_symlinks=True 时再用
    realpath 后的路径复核一次，两次都通过才算在内。
    """
    if not _lexically_contained(root, candidate):
        return False
    if resolve_symlinks:
        return _lexically_contained(os.path.realpath(root), os.path.realpath(candidate))
    return True


def join_in_endpoint(root: str, relative_path: str) -> str:
    """拼接端点根目录与相对路径并规范化；绝对路径会覆盖 root，由隔离检查拦截。"""
    return os.path.normpath(os.path.join(root, relative_path))
