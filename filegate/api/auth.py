# -*- coding: utf-8 -*-
"""
认证相关 API 路由
"""

from fastapi import APIRouter, Depends

from filegate.api.deps import get_auth_service
from filegate.services.auth_service import AuthService
from filegate.models.user import UserCreate, UserLogin, UserResponse
from filegate.models.auth import TokenResponse


router = APIRouter(prefix="/auth", tags=["认证"])


@router.post("/register", response_model=UserResponse)
async def register(
    user_data: UserCreate,
    service: AuthService = Depends(get_auth_service)
):
    """
    用户注册

    Args:
        user_data: 用户名和密码
        service: 认证服务

    Returns:
        UserResponse: 创建的用户信息
    """
    return await service.register(user_data.name, user_data.password)


@router.post("/login", response_model=TokenResponse)
async def login(
    user_data: UserLogin,
    service: AuthService = Depends(get_auth_service)
):
    """
    用户登录

    Args:
        user_data: 用户名和密码
        service: 认证服务

    Returns:
        TokenResponse: 凭据和过期时间
    """
    return await service.login(user_data.name, user_data.password)
