# -*- coding: utf-8 -*-
"""
认证服务

处理注册和登录相关的业务逻辑
"""

import logging

from filegate.core.exceptions import AlreadyExists, Conflict, InvalidCredential, NotFound
from filegate.core.security import CredentialIssuer, PasswordHasher
from filegate.models.auth import TokenResponse
from filegate.models.user import UserResponse
from filegate.services.identity_store import IdentityStore


logger = logging.getLogger(__name__)


class AuthService:
    """认证服务"""

    def __init__(
        self,
        users: IdentityStore,
        hasher: PasswordHasher,
        issuer: CredentialIssuer
    ):
        """
        初始化认证服务

        Args:
            users: 用户存储
            hasher: 密码哈希器
            issuer: 凭据签发器
        """
        self.users = users
        self.hasher = hasher
        self.issuer = issuer

    async def register(self, name: str, password: str) -> UserResponse:
        """
        注册新用户

        Args:
            name: 用户名
            password: 密码

        Returns:
            UserResponse: 新用户信息（不包含密码哈希）

        Raises:
            Conflict: 用户名已存在
        """
        if await self.users.find_by_name(name) is not None:
            raise Conflict("User already exist.")

        password_hash = self.hasher.hash(password)

        # 并发注册时由唯一约束兜底
        try:
            user = await self.users.create(name, password_hash)
        except AlreadyExists:
            raise Conflict("User already exist.")

        return UserResponse(id=user.id, name=user.name, created_at=user.created_at)

    async def login(self, name: str, password: str) -> TokenResponse:
        """
        用户登录

        Args:
            name: 用户名
            password: 密码

        Returns:
            TokenResponse: 凭据和过期时间

        Raises:
            NotFound: 用户不存在
            InvalidCredential: 密码错误
        """
        user = await self.users.find_by_name(name)

        if user is None:
            raise NotFound("User not found", status_code=400)

        if not self.hasher.verify(user.password_hash, password):
            logger.info(f"登录失败: {name}")
            raise InvalidCredential()

        credential = self.issuer.issue(user.id, user.name)
        logger.info(f"登录成功: {name}")

        return TokenResponse(
            name=user.name,
            token=credential.token,
            expires_at=credential.expires_at
        )
