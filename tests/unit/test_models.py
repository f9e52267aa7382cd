# -*- coding: utf-8 -*-
"""
数据模型单元测试
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from filegate.models import FileInfo, StoredFile, TokenResponse, UserCreate, UserLogin, UserResponse


class TestUserModels:
    """用户模型测试"""

    def test_password_alias(self):
        """测试 pass 字段作为 password 的别名"""
        user = UserCreate(**{"name": "alice", "pass": "pw1"})

        assert user.password == "pw1"
        assert UserLogin(**{"name": "alice", "password": "pw1"}).password == "pw1"

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            UserCreate(name="", password="pw1")

    def test_response_has_no_hash(self):
        response = UserResponse(id=1, name="alice")

        assert set(response.model_dump(by_alias=True)) == {"id", "name", "createdAt"}


class TestFileModels:
    """文件模型测试"""

    def test_file_info_projection(self):
        uploaded_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
        stored = StoredFile(
            key="1_abcdef01_a.png",
            owner_id=1,
            original_name="a.png",
            content_type="image/png",
            size=5,
            storage_ref="s3://bucket/1_abcdef01_a.png",
            uploaded_at=uploaded_at,
        )

        info = FileInfo.from_stored(stored).model_dump(by_alias=True)

        assert info == {"name": "1_abcdef01_a.png", "size": 5, "uploadDate": uploaded_at}

    def test_token_response_alias(self):
        expires_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
        response = TokenResponse(name="alice", token="t", expires_at=expires_at)

        assert response.model_dump(by_alias=True)["expiresAt"] == expires_at
