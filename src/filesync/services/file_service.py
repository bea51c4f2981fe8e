"""文件传输领域服务：下载、哈希、新建（上传）文件。

负责：
- 解析描述符并定位到端点根目录下的目标路径；
- 在任何文件系统访问之前做根目录隔离检查；
- 下载/上传的字节流读写（aiofiles）；
- 失败统一以 FileServiceError 抛出。
"""

from __future__ import annotations

import contextlib
import os
import stat
import time
from collections.abc import AsyncIterator
from pathlib import Path
from typing import NamedTuple
from uuid import uuid4

import aiofiles

from filesync.core.digest import hash_file
from filesync.core.endpoints import EndpointRegistry
from filesync.core.errors import ErrorKind, FileServiceError
from filesync.core.paths import is_contained, join_in_endpoint, resolve_descriptor
from filesync.observability.logging import get_logger
from filesync.observability.metrics import hash_seconds, transfer_bytes_total
from filesync.schemas.files import FileHashResponse


logger = get_logger(__name__)


class FileLocation(NamedTuple):
    descriptor: str
    endpoint: str
    root: str
    path: Path


def locate(registry: EndpointRegistry, descriptor: str | None, *, resolve_symlinks: bool = False) -> FileLocation:
    """描述符 -> 端点根目录 -> 目标绝对路径，并确认目标未逃出根目录。"""
    endpoint, relative_path = resolve_descriptor(descriptor)
    root = registry.root_of(endpoint)
    target = join_in_endpoint(root, relative_path)
    if not is_contained(root, target, resolve_symlinks=resolve_symlinks):
        raise FileServiceError(
            ErrorKind.OUT_OF_ENDPOINT,
            log_message=f"path '{relative_path}' escapes endpoint '{endpoint}' ({root})",
        )
    return FileLocation((descriptor or "").strip(), endpoint, root, Path(target))


def locate_download(
    registry: EndpointRegistry, descriptor: str | None, *, resolve_symlinks: bool = False
) -> FileLocation:
    """定位下载目标：必须存在且不是目录。"""
    loc = locate(registry, descriptor, resolve_symlinks=resolve_symlinks)
    try:
        info = loc.path.stat()
    except FileNotFoundError as exc:
        raise FileServiceError(ErrorKind.NOT_FOUND, log_message=f"file '{loc.path}' not exist") from exc
    except OSError as exc:
        raise FileServiceError(
            ErrorKind.FILESYSTEM_ERROR, log_message=f"error stating '{loc.path}': {exc}"
        ) from exc
    if stat.S_ISDIR(info.st_mode):
        raise FileServiceError(
            ErrorKind.PATH_IS_DIRECTORY,
            log_message=f"tried to download path '{loc.path}' which is a dir",
        )
    return loc


async def open_download(path: Path):
    """在发送响应头之前打开文件，打不开时仍能返回错误响应。"""
    try:
        return await aiofiles.open(path, "rb")
    except OSError as exc:
        raise FileServiceError(
            ErrorKind.FILESYSTEM_ERROR, log_message=f"error opening file '{path}': {exc}"
        ) from exc


async def iter_file(f, chunk_size: int) -> AsyncIterator[bytes]:
    """按块读取已打开的文件，原样输出（不压缩、不转码），结束后关闭文件。"""
    sent = 0
    try:
        while True:
            chunk = await f.read(chunk_size)
            if not chunk:
                break
            sent += len(chunk)
            transfer_bytes_total.labels(direction="download").inc(len(chunk))
            yield chunk
    finally:
        await f.close()
    logger.info("file_download_finish", path=str(f.name), size=sent)


def hash_descriptor(
    registry: EndpointRegistry,
    descriptor: str | None,
    *,
    max_size: int = 0,
    resolve_symlinks: bool = False,
) -> FileHashResponse:
    """计算描述符指向文件的摘要，返回摘要与原始描述符。"""
    loc = locate(registry, descriptor, resolve_symlinks=resolve_symlinks)
    start = time.perf_counter()
    digest = hash_file(loc.path, max_size)
    hash_seconds.observe(time.perf_counter() - start)
    return FileHashResponse(hash=digest, file=loc.descriptor)


def _prepare_target(target: Path, *, force: bool, recursive: bool) -> None:
    """写入前检查目标与父目录；必要时创建父目录链。"""
    try:
        info = target.stat()
    except (FileNotFoundError, NotADirectoryError):
        info = None
    except OSError as exc:
        raise FileServiceError(
            ErrorKind.FILESYSTEM_ERROR, log_message=f"error stating path '{target}': {exc}"
        ) from exc

    if info is not None:
        if stat.S_ISDIR(info.st_mode):
            raise FileServiceError(
                ErrorKind.PATH_IS_DIRECTORY,
                "dir with same path exist",
                f"can't create file '{target}' because same dir exists",
            )
        if not force:
            raise FileServiceError(
                ErrorKind.ALREADY_EXISTS,
                log_message=f"can't create file '{target}' because same file exists",
            )
        return

    parent = target.parent
    if parent.is_dir():
        return
    if parent.exists():
        raise FileServiceError(
            ErrorKind.PARENT_MISSING,
            "base path is not a dir",
            f"path '{parent}' is not a dir",
        )
    if not recursive:
        raise FileServiceError(ErrorKind.PARENT_MISSING, log_message=f"dir '{parent}' does not exist")
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError) as exc:
        raise FileServiceError(
            ErrorKind.PARENT_MISSING,
            "base path is not a dir",
            f"error making dir '{parent}': {exc}",
        ) from exc
    except OSError as exc:
        raise FileServiceError(
            ErrorKind.FILESYSTEM_ERROR, log_message=f"error making dir '{parent}': {exc}"
        ) from exc


async def create_file(
    registry: EndpointRegistry,
    descriptor: str | None,
    body: AsyncIterator[bytes],
    *,
    force: bool = False,
    recursive: bool = False,
    resolve_symlinks: bool = False,
) -> int:
    """新建（或 force 覆盖）文件，返回写入字节数。

    内容先写入同目录下的隐藏临时文件，完成后 os.replace 到目标路径；
    中途失败会删除临时文件，目标文件保持原样。
    """
    loc = locate(registry, descriptor, resolve_symlinks=resolve_symlinks)
    _prepare_target(loc.path, force=force, recursive=recursive)

    tmp_path = loc.path.with_name(f".{loc.path.name}.{uuid4().hex}.part")
    written = 0
    try:
        async with aiofiles.open(tmp_path, "wb") as f:
            async for chunk in body:
                if not chunk:
                    continue
                await f.write(chunk)
                written += len(chunk)
        os.replace(tmp_path, loc.path)
    except OSError as exc:
        raise FileServiceError(
            ErrorKind.FILESYSTEM_ERROR,
            log_message=f"couldn't write file data '{loc.path}': {exc}",
        ) from exc
    finally:
        with contextlib.suppress(OSError):
            tmp_path.unlink(missing_ok=True)

    transfer_bytes_total.labels(direction="upload").inc(written)
    logger.info("file_created", endpoint=loc.endpoint, path=str(loc.path), size=written, force=force)
    return written
