# -*- coding: utf-8 -*-
"""
pytest 配置文件

定义全局 fixtures 和测试配置
"""

import os
import sys
from pathlib import Path
import pytest

# 将项目根目录添加到 Python 路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from fixtures import *  # noqa: E402,F401,F403


TEST_SECRET_KEY = "test-secret-key-for-testing-only"


# =============================================================================
# 环境变量 fixtures
# =============================================================================

@pytest.fixture(scope="function", autouse=True)
def set_test_env():
    """
    自动设置测试环境变量

    autouse=True 表示所有测试自动使用此 fixture
    """
    original_env = os.environ.copy()

    os.environ["FILEGATE_TESTING"] = "true"
    os.environ["FILEGATE_SECRET_KEY"] = TEST_SECRET_KEY
    os.environ["FILEGATE_STORAGE_BACKEND"] = "local"

    yield

    os.environ.clear()
    os.environ.update(original_env)


# =============================================================================
# 配置 fixtures
# =============================================================================

@pytest.fixture(scope="function")
def test_settings(temp_dir: Path):
    """测试配置: 临时目录中的数据库文件和存储"""
    from filegate.core.config import Settings

    return Settings(
        SECRET_KEY=TEST_SECRET_KEY,
        TESTING=True,
        DATABASE_URL=f"sqlite:///{temp_dir / 'filegate.db'}",
        STORAGE_BACKEND="local",
        STORAGE_DIR=str(temp_dir / "storage"),
    )


# =============================================================================
# FastAPI 测试客户端 fixtures (用于集成测试)
# =============================================================================

@pytest.fixture(scope="function")
def app(test_settings):
    """使用测试配置创建的应用"""
    from filegate.main import create_app

    return create_app(test_settings)


@pytest.fixture(scope="function")
def client(app):
    """
    HTTP 测试客户端

    用于集成测试
    """
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client
