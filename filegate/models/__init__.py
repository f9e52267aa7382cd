# -*- coding: utf-8 -*-
"""
数据模型 (Pydantic Models)

定义所有 Pydantic 数据模型，用于请求/响应验证
"""

from .user import (
    User,
    UserCreate,
    UserLogin,
    UserResponse
)
from .auth import TokenResponse
from .file import (
    StoredFile,
    FileInfo,
    UploadResponse,
    MeResponse
)

__all__ = [
    # 用户相关
    "User",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    # 认证相关
    "TokenResponse",
    # 文件相关
    "StoredFile",
    "FileInfo",
    "UploadResponse",
    "MeResponse",
]
