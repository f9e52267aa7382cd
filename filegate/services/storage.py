# -*- coding: utf-8 -*-
"""
对象存储网关

按存储键写入和读取字节，对象不公开，只能通过网关读取
支持两种后端: S3（生产环境）和本地目录（开发和测试）
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import AsyncIterator, Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import iterate_in_threadpool, run_in_threadpool

from filegate.core.config import Settings
from filegate.core.exceptions import ServerError


logger = logging.getLogger(__name__)


CHUNK_SIZE = 64 * 1024


class StorageError(ServerError):
    """对象存储访问失败"""
    detail = "Server Error."


class StorageGateway(ABC):
    """对象存储接口"""

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """
        写入对象

        Args:
            key: 存储键
            data: 文件内容
            content_type: MIME 类型

        Returns:
            str: 存储位置引用，之后用于 get/delete
        """

    @abstractmethod
    async def get(self, ref: str) -> AsyncIterator[bytes]:
        """按位置引用读取对象，返回分块的字节流"""

    @abstractmethod
    async def delete(self, ref: str) -> None:
        """删除对象"""


# =============================================================================
# S3 后端
# =============================================================================

class S3StorageGateway(StorageGateway):
    """S3 存储（boto3），对象保持私有"""

    def __init__(self, bucket_name: str, client):
        """
        Args:
            bucket_name: 存储桶名称
            client: boto3 S3 客户端
        """
        self.bucket_name = bucket_name
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3StorageGateway":
        client = boto3.client(
            "s3",
            region_name=settings.BUCKET_REGION,
            aws_access_key_id=settings.ACCESS_KEY,
            aws_secret_access_key=settings.SECRET_ACCESS_KEY,
        )
        return cls(settings.BUCKET_NAME, client)

    def _ref(self, key: str) -> str:
        return f"s3://{self.bucket_name}/{key}"

    def _key(self, ref: str) -> str:
        prefix = f"s3://{self.bucket_name}/"
        if not ref.startswith(prefix):
            raise StorageError()
        return ref[len(prefix):]

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        try:
            await run_in_threadpool(
                self.client.put_object,
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 写入失败: {key}: {e}")
            raise StorageError() from e

        return self._ref(key)

    async def get(self, ref: str) -> AsyncIterator[bytes]:
        key = self._key(ref)
        try:
            response = await run_in_threadpool(
                self.client.get_object,
                Bucket=self.bucket_name,
                Key=key,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 读取失败: {key}: {e}")
            raise StorageError() from e

        body = response["Body"]
        return iterate_in_threadpool(body.iter_chunks(CHUNK_SIZE))

    async def delete(self, ref: str) -> None:
        key = self._key(ref)
        try:
            await run_in_threadpool(
                self.client.delete_object,
                Bucket=self.bucket_name,
                Key=key,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 删除失败: {key}: {e}")
            raise StorageError() from e


# =============================================================================
# 本地目录后端
# =============================================================================

class LocalStorageGateway(StorageGateway):
    """本地目录存储"""

    def __init__(self, storage_path: str = "storage"):
        """
        Args:
            storage_path: 存储目录路径
        """
        self.storage_path = Path(storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)

    def _path(self, ref: str) -> Path:
        path = (self.storage_path / ref).resolve()
        # 引用必须位于存储目录内
        if self.storage_path.resolve() not in path.parents:
            raise StorageError()
        return path

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        path = self._path(key)
        try:
            await run_in_threadpool(path.write_bytes, data)
        except OSError as e:
            logger.error(f"本地写入失败: {key}: {e}")
            raise StorageError() from e

        return key

    async def get(self, ref: str) -> AsyncIterator[bytes]:
        path = self._path(ref)
        try:
            handle = await run_in_threadpool(path.open, "rb")
        except OSError as e:
            logger.error(f"本地读取失败: {ref}: {e}")
            raise StorageError() from e

        return iterate_in_threadpool(_read_chunks(handle))

    async def delete(self, ref: str) -> None:
        path = self._path(ref)
        try:
            await run_in_threadpool(path.unlink, True)
        except OSError as e:
            logger.error(f"本地删除失败: {ref}: {e}")
            raise StorageError() from e


def _read_chunks(handle) -> Iterator[bytes]:
    with handle:
        while True:
            chunk = handle.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk


def create_storage(settings: Settings) -> StorageGateway:
    """
    根据配置创建存储网关

    Args:
        settings: 应用配置

    Returns:
        StorageGateway: 存储网关实例
    """
    if settings.STORAGE_BACKEND == "local":
        logger.info(f"使用本地存储: {settings.STORAGE_DIR}")
        return LocalStorageGateway(settings.STORAGE_DIR)

    logger.info(f"使用 S3 存储: {settings.BUCKET_NAME} ({settings.BUCKET_REGION})")
    return S3StorageGateway.from_settings(settings)
