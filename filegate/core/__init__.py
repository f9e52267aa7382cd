# -*- coding: utf-8 -*-
"""
核心模块

包含配置管理、数据库连接、安全功能和异常定义
"""

from .config import Settings, get_settings, load_config
from .security import (
    PasswordHasher,
    CredentialIssuer,
    Identity,
    IssuedCredential,
    TokenFailure,
    TokenFailureReason
)

__all__ = [
    "Settings",
    "get_settings",
    "load_config",
    "PasswordHasher",
    "CredentialIssuer",
    "Identity",
    "IssuedCredential",
    "TokenFailure",
    "TokenFailureReason",
]
