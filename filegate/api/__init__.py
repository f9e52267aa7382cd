# -*- coding: utf-8 -*-
"""
API 路由模块

包含所有 FastAPI 路由和依赖注入
"""

from .deps import (
    get_auth_service,
    get_file_service,
    require_identity
)

__all__ = [
    "get_auth_service",
    "get_file_service",
    "require_identity",
]
