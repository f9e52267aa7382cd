# -*- coding: utf-8 -*-
"""
用户身份存储

只负责持久化用户记录，密码哈希对它来说是不透明的字符串
"""

import sqlite3
import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from filegate.core.database import Database
from filegate.core.exceptions import AlreadyExists
from filegate.models.user import User


logger = logging.getLogger(__name__)


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        id=row["id"],
        name=row["name"],
        password_hash=row["password_hash"],
        created_at=row["created_at"],
    )


class IdentityStore:
    """用户记录存储"""

    def __init__(self, db: Database):
        """
        Args:
            db: 数据库实例
        """
        self.db = db

    async def create(self, name: str, password_hash: str) -> User:
        """
        创建用户

        用户名唯一性由数据库 UNIQUE 约束保证

        Args:
            name: 用户名
            password_hash: 已哈希的密码

        Returns:
            User: 新建的用户记录

        Raises:
            AlreadyExists: 用户名已被占用
        """
        return await run_in_threadpool(self._create, name, password_hash)

    async def find_by_name(self, name: str) -> Optional[User]:
        """根据用户名查找用户，不存在返回 None"""
        return await run_in_threadpool(self._find_one, "name", name)

    async def find_by_id(self, user_id: int) -> Optional[User]:
        """根据 ID 查找用户，不存在返回 None"""
        return await run_in_threadpool(self._find_one, "id", user_id)

    def _create(self, name: str, password_hash: str) -> User:
        try:
            with self.db.get_cursor() as cursor:
                cursor.execute(
                    '''INSERT INTO users (name, password_hash) VALUES (?, ?)
                       RETURNING id, name, password_hash, created_at''',
                    (name, password_hash)
                )
                row = cursor.fetchone()
        except sqlite3.IntegrityError as e:
            if "UNIQUE constraint" in str(e):
                raise AlreadyExists(name) from e
            raise

        user = _row_to_user(row)
        logger.info(f"创建用户: {user.name} (ID: {user.id})")
        return user

    def _find_one(self, column: str, value) -> Optional[User]:
        with self.db.get_cursor() as cursor:
            cursor.execute(
                f'''SELECT id, name, password_hash, created_at
                    FROM users WHERE {column} = ?''',
                (value,)
            )
            row = cursor.fetchone()

        if row is None:
            return None

        return _row_to_user(row)
