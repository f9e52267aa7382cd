# -*- coding: utf-8 -*-
"""
API 依赖注入

提供 FastAPI 依赖注入函数，包括访问控制（AccessGate）
"""

import logging
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from filegate.core.exceptions import ServerError, Unauthorized
from filegate.core.security import (
    CredentialIssuer,
    Identity,
    TokenFailure,
    TokenFailureReason
)
from filegate.services.auth_service import AuthService
from filegate.services.file_service import FileService


logger = logging.getLogger(__name__)


# 凭据所在的请求头，值可以带 "Bearer " 前缀
TOKEN_HEADER = "token"
BEARER_PREFIX = "Bearer "

token_header = APIKeyHeader(name=TOKEN_HEADER, auto_error=False)


# =============================================================================
# 服务依赖
# =============================================================================

def get_issuer(request: Request) -> CredentialIssuer:
    """获取凭据签发器"""
    return request.app.state.issuer


def get_auth_service(request: Request) -> AuthService:
    """获取认证服务"""
    state = request.app.state
    return AuthService(state.identity_store, state.hasher, state.issuer)


def get_file_service(request: Request) -> FileService:
    """获取文件服务"""
    state = request.app.state
    return FileService(
        state.file_registry,
        state.storage,
        accepted_content_types=state.settings.ACCEPTED_CONTENT_TYPES,
        max_upload_size=state.settings.MAX_UPLOAD_SIZE,
    )


# =============================================================================
# 认证依赖
# =============================================================================

def extract_token(header_value: Optional[str]) -> Optional[str]:
    """
    从请求头中取出 token，去掉可选的 "Bearer " 前缀

    Args:
        header_value: 请求头的值

    Returns:
        Optional[str]: token，没有则返回 None
    """
    if not header_value:
        return None

    token = header_value.strip()
    if token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):].strip()

    return token or None


async def require_identity(
    request: Request,
    header_value: Optional[str] = Depends(token_header),
    issuer: CredentialIssuer = Depends(get_issuer)
) -> Identity:
    """
    获取当前登录用户

    验证成功后把身份写入 request.state.identity

    Args:
        request: 当前请求
        header_value: token 请求头
        issuer: 凭据签发器

    Returns:
        Identity: 当前用户

    Raises:
        Unauthorized: 缺少 token 或 token 无效、过期
        ServerError: token 签名正确但载荷结构异常
    """
    result = issuer.verify(extract_token(header_value))

    if isinstance(result, TokenFailure):
        logger.info(f"拒绝请求 {request.url.path}: {result.reason.value}")

        if result.reason is TokenFailureReason.MISSING:
            raise Unauthorized("Unauthorized: No token")
        if result.reason is TokenFailureReason.BAD_PAYLOAD:
            raise ServerError("Server error")
        raise Unauthorized("Unauthorized: Invalid token")

    request.state.identity = result
    return result
