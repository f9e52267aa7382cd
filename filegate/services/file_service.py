# -*- coding: utf-8 -*-
"""
文件服务

组合文件登记和对象存储，实现上传、读取和列表
"""

import re
import time
import uuid
import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import AsyncIterator, List, Optional, Sequence

from filegate.core.exceptions import ServerError, ValidationError
from filegate.core.security import Identity
from filegate.models.file import FileInfo, StoredFile
from filegate.services.file_registry import FileRegistry
from filegate.services.storage import StorageGateway


logger = logging.getLogger(__name__)


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def make_storage_key(original_name: Optional[str], now_ms: Optional[int] = None) -> str:
    """
    生成存储键: <毫秒时间戳>_<随机后缀>_<清理后的文件名>

    Args:
        original_name: 上传时的文件名
        now_ms: 毫秒时间戳，默认为当前时间

    Returns:
        str: 存储键
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    # 只保留文件名部分，去掉目录
    base = PurePosixPath((original_name or "").replace("\\", "/")).name
    safe = _UNSAFE_CHARS.sub("_", base).strip("._") or "file"

    return f"{now_ms}_{uuid.uuid4().hex[:8]}_{safe[:100]}"


@dataclass
class FileStream:
    """读取结果: 元数据和字节流"""
    stored: StoredFile
    chunks: AsyncIterator[bytes]


class FileService:
    """文件服务"""

    def __init__(
        self,
        registry: FileRegistry,
        storage: StorageGateway,
        accepted_content_types: Sequence[str] = ("image/png",),
        max_upload_size: int = 10485760
    ):
        """
        初始化文件服务

        Args:
            registry: 文件元数据登记
            storage: 对象存储网关
            accepted_content_types: 允许上传的 MIME 类型
            max_upload_size: 最大上传大小（字节）
        """
        self.registry = registry
        self.storage = storage
        self.accepted_content_types = tuple(accepted_content_types)
        self.max_upload_size = max_upload_size

    async def upload(
        self,
        identity: Identity,
        original_name: Optional[str],
        content_type: Optional[str],
        data: bytes
    ) -> StoredFile:
        """
        上传文件

        先写入对象存储，成功后再登记元数据；
        登记失败时删除已写入的对象并返回服务器错误

        Args:
            identity: 当前用户
            original_name: 原始文件名
            content_type: MIME 类型
            data: 文件内容

        Returns:
            StoredFile: 文件记录

        Raises:
            ValidationError: 文件类型、大小不合法
            ServerError: 存储或登记失败
        """
        if content_type not in self.accepted_content_types:
            raise ValidationError("Please send a valid file")
        if not data:
            raise ValidationError("No file uploaded.")
        if len(data) > self.max_upload_size:
            raise ValidationError("File too large")

        key = make_storage_key(original_name)
        storage_ref = await self.storage.put(key, data, content_type)

        try:
            stored = await self.registry.record(
                key=key,
                owner_id=identity.id,
                size=len(data),
                storage_ref=storage_ref,
                content_type=content_type,
                original_name=original_name or key,
            )
        except Exception as e:
            logger.error(f"文件登记失败，删除已写入的对象: {key}: {e}")
            await self._discard(storage_ref)
            raise ServerError() from e

        return stored

    async def open(self, identity: Identity, key: str) -> FileStream:
        """
        读取文件

        Args:
            identity: 当前用户
            key: 存储键

        Returns:
            FileStream: 元数据和字节流

        Raises:
            NotFound: 文件不存在或不属于当前用户
        """
        stored = await self.registry.find_owned(key, identity.id)
        chunks = await self.storage.get(stored.storage_ref)
        return FileStream(stored=stored, chunks=chunks)

    async def list_owned(self, identity: Identity) -> List[FileInfo]:
        """列出当前用户的文件（名称、大小、上传时间）"""
        files = await self.registry.list_by_owner(identity.id)
        return [FileInfo.from_stored(stored) for stored in files]

    async def _discard(self, storage_ref: str) -> None:
        try:
            await self.storage.delete(storage_ref)
        except ServerError:
            # TODO: 删除失败的对象需要一个定期清理任务
            logger.error(f"无法删除孤立对象: {storage_ref}")
