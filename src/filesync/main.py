"""框架入口：FastAPI 初始化、中间件、全局异常处理、健康检查与 API 挂载。"""

from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from filesync.api.v1 import api_router, health
from filesync.core.config import get_settings
from filesync.core.errors import FileServiceError
from filesync.observability.access_log import access_log_middleware
from filesync.observability.logging import get_logger, get_request_id, set_request_id
from filesync.observability.metrics import operation_errors_total
from filesync.schemas.common import ErrorDetail

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期：启动时初始化日志与配置，关闭时清理。"""
    settings = get_settings()
    from filesync.observability.logging import configure_logging

    configure_logging(settings.log_level, settings.log_dir, settings.log_json)
    logger.info(
        "application_started",
        env=settings.env,
        port=settings.port,
        endpoints=sorted(settings.endpoints),
    )
    yield
    logger.info("application_shutdown")


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or get_request_id() or ""


def create_application() -> FastAPI:
    settings = get_settings()
    limiter = Limiter(
        key_func=lambda request: request.client.host if request.client else "unknown",
        default_limits=[settings.rate_limit] if settings.rate_limit.strip() else [],
    )

    app = FastAPI(
        title="Filesync",
        description="按端点暴露文件系统目录：目录树、下载、摘要与上传",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.env != "production" else None,
        redoc_url="/redoc" if settings.env != "production" else None,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # 后注册的先执行：access_log 先注册，request_id 后注册，故 request_id 先执行，访问日志可带上 request_id
    @app.middleware("http")
    async def access_log(request: Request, call_next):
        return await access_log_middleware(request, call_next)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or str(uuid4())
        set_request_id(rid)
        request.state.request_id = rid
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

    @app.exception_handler(FileServiceError)
    async def file_service_exception_handler(request: Request, exc: FileServiceError):
        rid = _request_id(request)
        operation_errors_total.labels(kind=exc.kind.value).inc()
        log = logger.error if exc.log_level == "error" else logger.warning
        log(
            "file_service_error",
            kind=exc.kind.value,
            category=exc.category.value,
            detail=exc.log_message,
            path=request.url.path,
            request_id=rid,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorDetail(message=exc.message, code=exc.kind.value, request_id=rid).model_dump(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.exception("unhandled_exception", request_id=rid, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=ErrorDetail(message="Internal server error", code="internal", request_id=rid).model_dump(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        rid = _request_id(request)
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorDetail(
                message=str(exc.detail) if exc.detail is not None else "",
                code=f"http_{exc.status_code}",
                request_id=rid,
            ).model_dump(),
            headers=getattr(exc, "headers", None),
        )

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(api_router)

    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

    return app


app = create_application()
