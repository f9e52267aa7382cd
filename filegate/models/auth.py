# -*- coding: utf-8 -*-
"""
认证相关数据模型
"""

from datetime import datetime
from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """登录响应模型"""
    name: str
    token: str
    expires_at: datetime = Field(..., alias="expiresAt")

    class Config:
        populate_by_name = True
