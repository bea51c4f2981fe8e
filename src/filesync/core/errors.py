"""文件服务错误分类：错误种类、HTTP 状态码、用户提示与日志级别。

所有业务失败都以 FileServiceError 抛出，由 main 中的全局异常处理器统一转为
{ok: false, message, code, request_id} 响应。
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    MISSING_FIELD = "missing_field"
    MALFORMED_DESCRIPTOR = "malformed_descriptor"
    ENDPOINT_NOT_FOUND = "endpoint_not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    OUT_OF_ENDPOINT = "out_of_endpoint"
    NOT_FOUND = "not_found"
    PATH_IS_DIRECTORY = "path_is_directory"
    ALREADY_EXISTS = "already_exists"
    PARENT_MISSING = "parent_missing"
    FILE_TOO_LARGE = "file_too_large"
    FILESYSTEM_ERROR = "filesystem_error"


class ErrorCategory(str, Enum):
    INPUT = "input"  # 客户端输入问题
    POLICY = "policy"  # 预期内的业务结果
    INTERNAL = "internal"  # 文件系统/配置异常，对外只给通用提示


STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.MISSING_FIELD: 400,
    ErrorKind.MALFORMED_DESCRIPTOR: 400,
    ErrorKind.ENDPOINT_NOT_FOUND: 404,
    ErrorKind.NOT_A_DIRECTORY: 500,
    ErrorKind.OUT_OF_ENDPOINT: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PATH_IS_DIRECTORY: 400,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.PARENT_MISSING: 400,
    ErrorKind.FILE_TOO_LARGE: 413,
    ErrorKind.FILESYSTEM_ERROR: 500,
}

CATEGORIES: dict[ErrorKind, ErrorCategory] = {
    ErrorKind.MISSING_FIELD: ErrorCategory.INPUT,
    ErrorKind.MALFORMED_DESCRIPTOR: ErrorCategory.INPUT,
    ErrorKind.ENDPOINT_NOT_FOUND: ErrorCategory.POLICY,
    ErrorKind.NOT_A_DIRECTORY: ErrorCategory.INTERNAL,
    ErrorKind.OUT_OF_ENDPOINT: ErrorCategory.POLICY,
    ErrorKind.NOT_FOUND: ErrorCategory.POLICY,
    ErrorKind.PATH_IS_DIRECTORY: ErrorCategory.POLICY,
    ErrorKind.ALREADY_EXISTS: ErrorCategory.POLICY,
    ErrorKind.PARENT_MISSING: ErrorCategory.POLICY,
    ErrorKind.FILE_TOO_LARGE: ErrorCategory.POLICY,
    ErrorKind.FILESYSTEM_ERROR: ErrorCategory.INTERNAL,
}

DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.MISSING_FIELD: "required field is empty",
    ErrorKind.MALFORMED_DESCRIPTOR: "sent a bad file descriptor",
    ErrorKind.ENDPOINT_NOT_FOUND: "endpoint not found",
    ErrorKind.NOT_A_DIRECTORY: "there is a problem with this endpoint",
    ErrorKind.OUT_OF_ENDPOINT: "path is outside of the endpoint",
    ErrorKind.NOT_FOUND: "file not found",
    ErrorKind.PATH_IS_DIRECTORY: "path is a dir",
    ErrorKind.ALREADY_EXISTS: "file already exists",
    ErrorKind.PARENT_MISSING: "base directory does not exist",
    ErrorKind.FILE_TOO_LARGE: "file is bigger than max hash size",
    ErrorKind.FILESYSTEM_ERROR: "internal server error happened",
}


def status_for(kind: ErrorKind) -> int:
    return STATUS_CODES[kind]


class FileServiceError(Exception):
    """带错误种类的业务异常。

    message 面向调用方；log_message 只写日志，可包含真实路径与底层异常。
    internal 类错误始终使用默认提示，避免泄露文件系统布局。
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str | None = None,
        log_message: str | None = None,
    ) -> None:
        self.kind = kind
        if self.category is ErrorCategory.INTERNAL or not message:
            message = DEFAULT_MESSAGES[kind]
        self.message = message
        self.log_message = log_message or message
        super().__init__(self.log_message)

    @property
    def status_code(self) -> int:
        return status_for(self.kind)

    @property
    def category(self) -> ErrorCategory:
        return CATEGORIES[self.kind]

    @property
    def log_level(self) -> str:
        return "error" if self.category is ErrorCategory.INTERNAL else "warning"

    def __repr__(self) -> str:
        return f"FileServiceError({self.kind.value!r}, {self.log_message!r})"
