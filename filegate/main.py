# -*- coding: utf-8 -*-
"""
FileGate 主应用入口

FastAPI 应用工厂: 根据配置创建协作组件并注册路由
"""

import time
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from filegate.core.config import Settings, get_settings
from filegate.core.database import get_database, init_database
from filegate.core.exceptions import FileGateError, ValidationError
from filegate.core.security import CredentialIssuer, PasswordHasher
from filegate.services.file_registry import FileRegistry
from filegate.services.identity_store import IdentityStore
from filegate.services.storage import StorageGateway, create_storage


logger = logging.getLogger(__name__)


def configure_logging(settings: Settings):
    """配置日志"""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[StorageGateway] = None
) -> FastAPI:
    """
    创建 FastAPI 应用

    缺少签名密钥或存储凭据时直接抛出 ConfigurationError，不启动服务

    Args:
        settings: 应用配置，默认从环境变量和 config.ini 加载
        storage: 存储网关，默认根据配置创建

    Returns:
        FastAPI: 应用实例
    """
    if settings is None:
        settings = get_settings()
    settings.require_secrets()

    configure_logging(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.DESCRIPTION,
        version=settings.VERSION,
        docs_url="/docs" if not settings.TESTING else None,
        redoc_url="/redoc" if not settings.TESTING else None,
    )

    # =========================================================================
    # 协作组件
    # =========================================================================

    db = get_database(settings)
    init_database(db)

    app.state.settings = settings
    app.state.db = db
    app.state.hasher = PasswordHasher()
    app.state.issuer = CredentialIssuer.from_settings(settings)
    app.state.identity_store = IdentityStore(db)
    app.state.file_registry = FileRegistry(db)
    app.state.storage = storage or create_storage(settings)

    # =========================================================================
    # 路由注册
    # =========================================================================

    from filegate.api import auth, files

    app.include_router(auth.router)
    app.include_router(files.router)

    # =========================================================================
    # 异常处理
    # =========================================================================

    @app.exception_handler(FileGateError)
    async def handle_filegate_error(request: Request, exc: FileGateError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        # 只记录出错的字段位置和类型，请求内容可能包含密码
        fields = ", ".join(
            ".".join(str(part) for part in error.get("loc", ())) + f" ({error.get('type')})"
            for error in exc.errors()
        )
        logger.info(f"请求数据不合法 {request.url.path}: {fields}")
        return JSONResponse(status_code=400, content={"detail": ValidationError.detail})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"未处理的异常: {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"detail": "Server error"})

    # =========================================================================
    # 请求日志中间件
    # =========================================================================

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """记录请求（不记录请求头和请求体）"""
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.1f}ms)"
        )
        return response

    # =========================================================================
    # 健康检查
    # =========================================================================

    @app.get("/health")
    async def health_check():
        """健康检查端点"""
        return {"status": "healthy"}

    @app.on_event("shutdown")
    async def shutdown_event():
        """应用关闭时执行"""
        db.close()
        logger.info(f"{settings.PROJECT_NAME} 正在关闭...")

    logger.info(f"{settings.PROJECT_NAME} v{settings.VERSION} 初始化完成")
    return app
