# -*- coding: utf-8 -*-
"""
业务服务层

包含存储组件和请求处理服务
"""

from .identity_store import IdentityStore
from .file_registry import FileRegistry
from .storage import StorageGateway, S3StorageGateway, LocalStorageGateway, create_storage
from .auth_service import AuthService
from .file_service import FileService

__all__ = [
    "IdentityStore",
    "FileRegistry",
    "StorageGateway",
    "S3StorageGateway",
    "LocalStorageGateway",
    "create_storage",
    "AuthService",
    "FileService",
]
