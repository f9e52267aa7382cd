# -*- coding: utf-8 -*-
"""
文件相关数据模型
"""

from datetime import datetime
from typing import List
from pydantic import BaseModel, Field


class StoredFile(BaseModel):
    """文件元数据记录（内部使用）"""
    key: str
    owner_id: int
    original_name: str
    content_type: str
    size: int
    storage_ref: str
    uploaded_at: datetime


class FileInfo(BaseModel):
    """文件列表项，只暴露名称、大小和上传时间"""
    name: str
    size: int
    upload_date: datetime = Field(..., alias="uploadDate")

    class Config:
        populate_by_name = True

    @classmethod
    def from_stored(cls, stored: StoredFile) -> "FileInfo":
        return cls(name=stored.key, size=stored.size, upload_date=stored.uploaded_at)


class UploadResponse(BaseModel):
    """上传响应模型"""
    key: str
    size: int
    content_type: str = Field(..., alias="contentType")
    upload_date: datetime = Field(..., alias="uploadDate")

    class Config:
        populate_by_name = True


class MeResponse(BaseModel):
    """当前用户及其文件列表"""
    name: str
    files: List[FileInfo]
