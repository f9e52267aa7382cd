# -*- coding: utf-8 -*-
"""
文件操作相关 API 路由
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from filegate.api.deps import get_file_service, require_identity
from filegate.core.exceptions import ValidationError
from filegate.core.security import Identity
from filegate.models.file import MeResponse, UploadResponse
from filegate.services.file_service import FileService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["文件"])


@router.get("/me", response_model=MeResponse)
async def get_me(
    identity: Identity = Depends(require_identity),
    service: FileService = Depends(get_file_service)
):
    """
    当前用户信息和文件列表

    Args:
        identity: 当前用户
        service: 文件服务

    Returns:
        MeResponse: 用户名和文件列表
    """
    files = await service.list_owned(identity)
    return MeResponse(name=identity.name, files=files)


@router.post(
    "/files",
    response_model=UploadResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "properties": {"file": {"type": "string", "format": "binary"}},
                        "required": ["file"],
                    }
                }
            },
        }
    },
)
async def upload_file(
    request: Request,
    identity: Identity = Depends(require_identity),
    service: FileService = Depends(get_file_service)
):
    """
    上传文件（multipart 字段名 file）

    请求体在身份验证通过之后才解析，未认证的请求不会读取上传内容

    Args:
        request: 请求对象
        identity: 当前用户
        service: 文件服务

    Returns:
        UploadResponse: 存储键和文件信息
    """
    try:
        form = await request.form()
    except (HTTPException, MultiPartException) as e:
        logger.warning(f"上传请求体解析失败: {type(e).__name__}")
        raise ValidationError("Please send a valid file") from e

    try:
        file = form.get("file")
        if not isinstance(file, UploadFile):
            raise ValidationError("Please send a valid file")

        # 多读一个字节用于判断是否超过大小限制
        data = await file.read(service.max_upload_size + 1)
    finally:
        await form.close()

    stored = await service.upload(identity, file.filename, file.content_type, data)

    return UploadResponse(
        key=stored.key,
        size=stored.size,
        content_type=stored.content_type,
        upload_date=stored.uploaded_at
    )


@router.get("/files/{key}")
async def fetch_file(
    key: str,
    identity: Identity = Depends(require_identity),
    service: FileService = Depends(get_file_service)
):
    """
    读取文件

    文件不存在和不属于当前用户都返回 404

    Args:
        key: 存储键
        identity: 当前用户
        service: 文件服务

    Returns:
        StreamingResponse: 文件字节流
    """
    stream = await service.open(identity, key)

    return StreamingResponse(
        stream.chunks,
        media_type=stream.stored.content_type
    )
