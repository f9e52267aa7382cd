# -*- coding: utf-8 -*-
"""
安全模块

包含密码哈希（argon2）、JWT 凭据签发和验证
"""

import enum
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from passlib.context import CryptContext
from jose import jws, jwt
from jose.exceptions import JWSError

from .config import Settings


logger = logging.getLogger(__name__)


# =============================================================================
# 密码哈希
# =============================================================================

class PasswordHasher:
    """加盐的单向密码哈希（argon2，内存困难）"""

    def __init__(self, context: Optional[CryptContext] = None):
        self.context = context or CryptContext(schemes=["argon2"], deprecated="auto")

    def hash(self, secret: str) -> str:
        """
        对密码进行哈希处理，盐值嵌入在结果中

        Args:
            secret: 原始密码

        Returns:
            str: 哈希后的密码
        """
        return self.context.hash(secret)

    def verify(self, digest: str, secret: str) -> bool:
        """
        验证密码

        任何异常（哈希格式错误、未知算法等）都视为验证失败

        Args:
            digest: 哈希后的密码
            secret: 原始密码

        Returns:
            bool: 密码是否匹配
        """
        try:
            return bool(self.context.verify(secret, digest))
        except Exception as e:
            logger.warning(f"密码验证异常，按失败处理: {type(e).__name__}")
            return False


# =============================================================================
# 凭据签发与验证
# =============================================================================

@dataclass(frozen=True)
class Identity:
    """已验证的请求身份"""
    id: int
    name: str


@dataclass(frozen=True)
class IssuedCredential:
    """签发的凭据"""
    token: str
    expires_at: datetime


class TokenFailureReason(enum.Enum):
    MISSING = "missing"
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"
    BAD_PAYLOAD = "bad_payload"


@dataclass(frozen=True)
class TokenFailure:
    """凭据验证失败"""
    reason: TokenFailureReason


VerifyResult = Union[Identity, TokenFailure]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialIssuer:
    """签发和验证有时效的 JWT 凭据"""

    def __init__(self, secret_key: str, expire_minutes: int = 20, algorithm: str = "HS256"):
        """
        Args:
            secret_key: 服务端签名密钥
            expire_minutes: 凭据有效期（分钟）
            algorithm: 签名算法
        """
        self._secret_key = secret_key
        self.lifetime = timedelta(minutes=expire_minutes)
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialIssuer":
        return cls(
            settings.SECRET_KEY,
            expire_minutes=settings.TOKEN_EXPIRE_MINUTES,
            algorithm=settings.TOKEN_ALGORITHM,
        )

    def issue(
        self,
        user_id: int,
        user_name: str,
        now: Optional[datetime] = None
    ) -> IssuedCredential:
        """
        签发凭据

        Args:
            user_id: 用户 ID
            user_name: 用户名
            now: 签发时间，默认为当前时间

        Returns:
            IssuedCredential: token 和过期时间
        """
        issued_at = now or _utcnow()
        exp = int((issued_at + self.lifetime).timestamp())

        claims = {
            "id": user_id,
            "name": user_name,
            "iat": int(issued_at.timestamp()),
            "exp": exp,
        }
        token = jwt.encode(claims, self._secret_key, algorithm=self.algorithm)

        # 返回给客户端的过期时间与 token 中的 exp 一致（整秒）
        return IssuedCredential(
            token=token,
            expires_at=datetime.fromtimestamp(exp, timezone.utc)
        )

    def verify(self, token: Optional[str], now: Optional[datetime] = None) -> VerifyResult:
        """
        验证凭据

        先校验签名，再检查载荷结构和过期时间

        Args:
            token: JWT 字符串
            now: 验证时间，默认为当前时间

        Returns:
            VerifyResult: 成功返回 Identity，失败返回 TokenFailure
        """
        if not token:
            return TokenFailure(TokenFailureReason.MISSING)

        # 结构检查，jws.verify 会把签名错误和格式错误都报成 JWSError
        try:
            jws.get_unverified_header(token)
        except JWSError:
            return TokenFailure(TokenFailureReason.MALFORMED)

        try:
            raw_payload = jws.verify(token, self._secret_key, algorithms=[self.algorithm])
        except JWSError:
            return TokenFailure(TokenFailureReason.BAD_SIGNATURE)

        try:
            payload = json.loads(raw_payload)
        except ValueError:
            return TokenFailure(TokenFailureReason.BAD_PAYLOAD)

        if not isinstance(payload, dict):
            return TokenFailure(TokenFailureReason.BAD_PAYLOAD)

        user_id = payload.get("id")
        user_name = payload.get("name")
        exp = payload.get("exp")

        # bool 是 int 的子类，需要单独排除
        if (
            not isinstance(user_id, int) or isinstance(user_id, bool)
            or not isinstance(user_name, str)
            or not isinstance(exp, (int, float)) or isinstance(exp, bool)
        ):
            return TokenFailure(TokenFailureReason.BAD_PAYLOAD)

        current = now or _utcnow()
        if current.timestamp() >= exp:
            return TokenFailure(TokenFailureReason.EXPIRED)

        return Identity(id=user_id, name=user_name)
