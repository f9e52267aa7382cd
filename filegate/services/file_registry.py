# -*- coding: utf-8 -*-
"""
文件元数据登记

记录每个存储对象与其所有者的关系，并执行所有权检查
"""

import sqlite3
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool

from filegate.core.database import Database
from filegate.core.exceptions import AlreadyExists, NotFound
from filegate.models.file import StoredFile


logger = logging.getLogger(__name__)


_COLUMNS = "key, owner_id, original_name, content_type, size, storage_ref, uploaded_at"


def _row_to_file(row: sqlite3.Row) -> StoredFile:
    return StoredFile(
        key=row["key"],
        owner_id=row["owner_id"],
        original_name=row["original_name"],
        content_type=row["content_type"],
        size=row["size"],
        storage_ref=row["storage_ref"],
        uploaded_at=row["uploaded_at"],
    )


class FileRegistry:
    """文件元数据存储"""

    def __init__(self, db: Database):
        """
        Args:
            db: 数据库实例
        """
        self.db = db

    async def record(
        self,
        key: str,
        owner_id: int,
        size: int,
        storage_ref: str,
        content_type: str,
        original_name: str,
        uploaded_at: Optional[datetime] = None
    ) -> StoredFile:
        """
        登记一个已写入存储的文件

        Args:
            key: 存储键（全局唯一）
            owner_id: 所有者用户 ID
            size: 文件大小（字节）
            storage_ref: 存储位置引用
            content_type: MIME 类型
            original_name: 上传时的原始文件名
            uploaded_at: 上传时间，默认为当前时间

        Returns:
            StoredFile: 文件记录

        Raises:
            AlreadyExists: 存储键已被使用
        """
        stored = StoredFile(
            key=key,
            owner_id=owner_id,
            original_name=original_name,
            content_type=content_type,
            size=size,
            storage_ref=storage_ref,
            uploaded_at=uploaded_at or datetime.now(timezone.utc),
        )
        return await run_in_threadpool(self._insert, stored)

    async def find_by_key(self, key: str) -> Optional[StoredFile]:
        """根据存储键查找文件，不存在返回 None"""
        return await run_in_threadpool(self._find_by_key, key)

    async def list_by_owner(self, owner_id: int) -> List[StoredFile]:
        """
        列出用户拥有的文件

        按上传时间升序排列，时间相同时按登记顺序

        Args:
            owner_id: 所有者用户 ID

        Returns:
            List[StoredFile]: 文件列表
        """
        return await run_in_threadpool(self._list_by_owner, owner_id)

    async def find_owned(self, key: str, owner_id: int) -> StoredFile:
        """
        所有权检查

        文件不存在和文件属于其他用户返回同样的 NotFound，
        不泄露其他用户文件是否存在

        Args:
            key: 存储键
            owner_id: 请求者用户 ID

        Returns:
            StoredFile: 文件记录

        Raises:
            NotFound: 文件不存在或请求者不是所有者
        """
        stored = await self.find_by_key(key)

        if stored is None or stored.owner_id != owner_id:
            raise NotFound("File not found")

        return stored

    def _insert(self, stored: StoredFile) -> StoredFile:
        try:
            with self.db.get_cursor() as cursor:
                cursor.execute(
                    f'''INSERT INTO files ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)''',
                    (
                        stored.key,
                        stored.owner_id,
                        stored.original_name,
                        stored.content_type,
                        stored.size,
                        stored.storage_ref,
                        stored.uploaded_at.isoformat(),
                    )
                )
        except sqlite3.IntegrityError as e:
            if "UNIQUE constraint" in str(e):
                raise AlreadyExists(stored.key) from e
            raise

        logger.info(f"登记文件: {stored.key} (所有者: {stored.owner_id}, {stored.size} 字节)")
        return stored

    def _find_by_key(self, key: str) -> Optional[StoredFile]:
        with self.db.get_cursor() as cursor:
            cursor.execute(
                f'''SELECT {_COLUMNS} FROM files WHERE key = ?''',
                (key,)
            )
            row = cursor.fetchone()

        if row is None:
            return None

        return _row_to_file(row)

    def _list_by_owner(self, owner_id: int) -> List[StoredFile]:
        with self.db.get_cursor() as cursor:
            cursor.execute(
                f'''SELECT {_COLUMNS} FROM files
                    WHERE owner_id = ?
                    ORDER BY uploaded_at ASC, id ASC''',
                (owner_id,)
            )
            rows = cursor.fetchall()

        return [_row_to_file(row) for row in rows]
