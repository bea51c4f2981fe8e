"""文件内容摘要：XXH64（非加密），用于变更检测与去重提示，不用于完整性校验。"""

from __future__ import annotations

import stat
from pathlib import Path

import xxhash

from filesync.core.errors import ErrorKind, FileServiceError

# 流式读取的块大小
HASH_CHUNK_SIZE = 1024 * 1024


def hash_file(path: str | Path, max_size: int = 0) -> str:
    """计算文件的 XXH64 摘要，返回 16 位小写十六进制。

    目录直接拒绝；max_size > 0 且文件超限时不读取任何字节即返回 FileTooLarge。
    """
    path = Path(path)
    try:
        info = path.stat()
    except FileNotFoundError as exc:
        raise FileServiceError(ErrorKind.NOT_FOUND, log_message=f"file '{path}' not found") from exc
    except OSError as exc:
        raise FileServiceError(
            ErrorKind.FILESYSTEM_ERROR, log_message=f"error stating file '{path}': {exc}"
        ) from exc

    if stat.S_ISDIR(info.st_mode):
        raise FileServiceError(
            ErrorKind.PATH_IS_DIRECTORY, log_message=f"wanted to get hash of dir '{path}'"
        )
    if max_size > 0 and info.st_size > max_size:
        raise FileServiceError(
            ErrorKind.FILE_TOO_LARGE,
            log_message=f"file '{path}' is {info.st_size} bytes, max hash size is {max_size}",
        )

    hasher = xxhash.xxh64()
    try:
        with path.open("rb") as f:
            for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
                hasher.update(chunk)
    except OSError as exc:
        raise FileServiceError(
            ErrorKind.FILESYSTEM_ERROR, log_message=f"error hashing file '{path}': {exc}"
        ) from exc
    return hasher.hexdigest()
