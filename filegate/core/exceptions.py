# -*- coding: utf-8 -*-
"""
异常定义

所有业务异常都携带 HTTP 状态码和可以安全返回给客户端的消息
"""

from typing import Optional


class FileGateError(Exception):
    """业务异常基类"""

    status_code: int = 500
    detail: str = "Server error"

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None):
        if detail is not None:
            self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.detail)


class ValidationError(FileGateError):
    """请求数据不合法"""
    status_code = 400
    detail = "Invalid request"


class Conflict(FileGateError):
    """资源已存在（例如用户名重复）"""
    status_code = 400
    detail = "Already exists"


class Unauthorized(FileGateError):
    """未认证或认证失败"""
    status_code = 401
    detail = "Unauthorized"


class InvalidCredential(Unauthorized):
    """密码错误"""
    detail = "Password incorrect."


class NotFound(FileGateError):
    """资源不存在，或者无权访问（两者对外不可区分）"""
    status_code = 404
    detail = "Not found"


class ServerError(FileGateError):
    """服务器内部错误"""
    status_code = 500
    detail = "Server error"


class AlreadyExists(Exception):
    """持久层唯一约束冲突"""


class ConfigurationError(Exception):
    """启动配置缺失或无效"""
