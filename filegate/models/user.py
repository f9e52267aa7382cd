# -*- coding: utf-8 -*-
"""
用户相关数据模型
"""

from datetime import datetime
from typing import Optional
from pydantic import AliasChoices, BaseModel, Field


class User(BaseModel):
    """用户记录（内部使用，包含密码哈希）"""
    id: int
    name: str
    password_hash: str = Field(..., repr=False)
    created_at: Optional[datetime] = None


class UserCreate(BaseModel):
    """注册请求模型"""
    name: str = Field(..., min_length=1, max_length=64, description="用户名")
    password: str = Field(
        ...,
        min_length=1,
        max_length=256,
        validation_alias=AliasChoices("password", "pass"),
        description="密码"
    )


class UserLogin(BaseModel):
    """登录请求模型"""
    name: str = Field(..., description="用户名")
    password: str = Field(
        ...,
        validation_alias=AliasChoices("password", "pass"),
        description="密码"
    )


class UserResponse(BaseModel):
    """用户响应模型（不包含密码哈希）"""
    id: int
    name: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    class Config:
        populate_by_name = True
