"""结构化日志（structlog）：request_id 注入；控制台输出 + 按小时轮转文件，error 单独文件。"""

import json
import logging
import logging.handlers
import os
import sys
from contextvars import ContextVar
from uuid import uuid4

import structlog


request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    return request_id_ctx.get() or ""


def set_request_id(rid: str | None = None) -> str:
    rid = rid or str(uuid4())
    request_id_ctx.set(rid)
    return rid


def add_request_id(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    rid = get_request_id()
    if rid:
        event_dict["request_id"] = rid
    return event_dict


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        add_request_id,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _json_renderer() -> structlog.processors.JSONRenderer:
    return structlog.processors.JSONRenderer(
        serializer=lambda obj, **kw: json.dumps(obj, ensure_ascii=False, **kw)
    )


def _rotating_handler(path: str, level: int, backup_count: int, formatter: logging.Formatter):
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=path,
        when="H",
        interval=1,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def configure_logging(log_level: str = "INFO", log_dir: str = "./logs", json_console: bool = True) -> None:
    """配置 structlog：app.log 全部级别、error.log 仅 ERROR（JSON，按小时轮转），同时输出到 stdout。"""
    os.makedirs(log_dir, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO)

    file_formatter = structlog.stdlib.ProcessorFormatter(
        processor=_json_renderer(),
        foreign_pre_chain=_shared_processors(),
    )
    console_formatter = structlog.stdlib.ProcessorFormatter(
        processor=_json_renderer() if json_console else structlog.dev.ConsoleRenderer(),
        foreign_pre_chain=_shared_processors(),
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(level)

    app_logger = logging.getLogger("filesync")
    app_logger.setLevel(level)
    app_logger.handlers.clear()
    app_logger.addHandler(console_handler)
    app_logger.addHandler(
        _rotating_handler(os.path.join(log_dir, "app.log"), level, 24 * 7, file_formatter)
    )
    app_logger.addHandler(
        _rotating_handler(os.path.join(log_dir, "error.log"), logging.ERROR, 24 * 30, file_formatter)
    )
    app_logger.propagate = False

    # uvicorn 的日志统一走 filesync 的 handler
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.setLevel(level)
        lg.addHandler(console_handler)
        lg.propagate = False

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
