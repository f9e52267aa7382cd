# -*- coding: utf-8 -*-
"""
测试 fixtures

此模块包含各种可重用的测试 fixtures
"""

from .database import *
from .auth import *
from .temp_dir import *

__all__ = [
    'temp_dir',
    'sample_png',
    'test_database',
    'identity_store',
    'file_registry',
    'local_storage',
    'password_hasher',
    'credential_issuer',
    'register_user',
    'auth_headers',
]
