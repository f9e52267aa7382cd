# -*- coding: utf-8 -*-
"""
配置管理模块

使用 Pydantic 管理应用配置
支持环境变量和 config.ini 文件，优先级: 环境变量 > config.ini > 默认值
"""

import os
import configparser
from pathlib import Path
from typing import Optional, List, Dict, Any
from functools import lru_cache
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from .exceptions import ConfigurationError


# config.ini 中的 (section, key) -> 环境变量名
_INI_KEYS = {
    ("server", "host"): "FILEGATE_HOST",
    ("server", "port"): "FILEGATE_PORT",
    ("security", "secret_key"): "FILEGATE_SECRET_KEY",
    ("database", "url"): "FILEGATE_DATABASE_URL",
    ("storage", "backend"): "FILEGATE_STORAGE_BACKEND",
    ("storage", "dir"): "FILEGATE_STORAGE_DIR",
    ("storage", "bucket_name"): "FILEGATE_BUCKET_NAME",
    ("storage", "bucket_region"): "FILEGATE_BUCKET_REGION",
    ("upload", "max_size"): "FILEGATE_MAX_UPLOAD_SIZE",
    ("upload", "accepted_content_types"): "FILEGATE_ACCEPTED_CONTENT_TYPES",
    ("logging", "level"): "FILEGATE_LOG_LEVEL",
}

_LIST_FIELDS = ("FILEGATE_ACCEPTED_CONTENT_TYPES",)


class Settings(BaseModel):
    """应用配置（创建后不可修改）"""

    # 应用基本信息
    PROJECT_NAME: str = "FileGate"
    VERSION: str = "0.1.0"
    DESCRIPTION: str = "Authenticated file storage gateway"

    # 服务器配置
    HOST: str = Field(default="0.0.0.0", alias="FILEGATE_HOST")
    PORT: int = Field(default=3000, alias="FILEGATE_PORT")

    # 安全配置
    SECRET_KEY: str = Field(..., min_length=1, alias="FILEGATE_SECRET_KEY")
    TOKEN_EXPIRE_MINUTES: int = 20
    TOKEN_ALGORITHM: str = "HS256"

    # 数据库配置
    DATABASE_URL: str = Field(default="sqlite:///./filegate.db", alias="FILEGATE_DATABASE_URL")

    # 测试模式
    TESTING: bool = Field(default=False, alias="FILEGATE_TESTING")

    # 存储配置: s3 或 local
    STORAGE_BACKEND: str = Field(default="s3", alias="FILEGATE_STORAGE_BACKEND")
    STORAGE_DIR: str = Field(default="storage", alias="FILEGATE_STORAGE_DIR")
    BUCKET_NAME: Optional[str] = Field(default=None, alias="FILEGATE_BUCKET_NAME")
    BUCKET_REGION: Optional[str] = Field(default=None, alias="FILEGATE_BUCKET_REGION")
    ACCESS_KEY: Optional[str] = Field(default=None, alias="FILEGATE_ACCESS_KEY")
    SECRET_ACCESS_KEY: Optional[str] = Field(default=None, alias="FILEGATE_SECRET_ACCESS_KEY")

    # 上传配置
    MAX_UPLOAD_SIZE: int = Field(default=10485760, alias="FILEGATE_MAX_UPLOAD_SIZE")  # 10MB
    ACCEPTED_CONTENT_TYPES: List[str] = Field(
        default=["image/png"],
        alias="FILEGATE_ACCEPTED_CONTENT_TYPES"
    )

    # SSL/TLS 配置
    SSL_CERTFILE: Optional[str] = Field(default=None, alias="FILEGATE_SSL_CERTFILE")
    SSL_KEYFILE: Optional[str] = Field(default=None, alias="FILEGATE_SSL_KEYFILE")

    # 日志配置
    LOG_LEVEL: str = Field(default="INFO", alias="FILEGATE_LOG_LEVEL")

    class Config:
        frozen = True
        populate_by_name = True
        extra = "ignore"

    def require_secrets(self) -> "Settings":
        """
        检查存储后端所需的密钥是否齐全

        Returns:
            Settings: 自身，便于链式调用

        Raises:
            ConfigurationError: 缺少必需的配置项
        """
        if self.STORAGE_BACKEND == "s3":
            missing = [
                name for name in ("BUCKET_NAME", "BUCKET_REGION", "ACCESS_KEY", "SECRET_ACCESS_KEY")
                if not getattr(self, name)
            ]
            if missing:
                names = ", ".join(f"FILEGATE_{name}" for name in missing)
                raise ConfigurationError(f"Missing object storage settings: {names}")
        elif self.STORAGE_BACKEND != "local":
            raise ConfigurationError(f"Unsupported storage backend: {self.STORAGE_BACKEND}")

        return self


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    """
    读取 config.ini，返回以环境变量名为键的字典

    Args:
        config_path: config.ini 文件路径

    Returns:
        Dict[str, Any]: 配置项
    """
    values: Dict[str, Any] = {}

    if not config_path.exists():
        return values

    config = configparser.ConfigParser()
    config.read(config_path, encoding="utf-8")

    for (section, key), alias in _INI_KEYS.items():
        if section in config and key in config[section]:
            values[alias] = config[section][key]

    return values


def _read_environment(environ: Dict[str, str]) -> Dict[str, Any]:
    """从环境变量中读取所有 FILEGATE_ 配置项"""
    values: Dict[str, Any] = {}

    for name, field in Settings.model_fields.items():
        if field.alias and field.alias in environ:
            values[field.alias] = environ[field.alias]

    return values


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None
) -> Settings:
    """
    加载配置

    优先级: 环境变量 > config.ini > 默认值

    Args:
        config_path: config.ini 文件路径，默认为项目根目录下的 config.ini
        environ: 环境变量，默认为 os.environ

    Returns:
        Settings: 配置对象

    Raises:
        ConfigurationError: 配置缺失或格式错误
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config.ini"
    if environ is None:
        environ = dict(os.environ)

    values = _read_config_file(config_path)
    values.update(_read_environment(environ))

    # 逗号分隔的列表
    for alias in _LIST_FIELDS:
        if isinstance(values.get(alias), str):
            values[alias] = [
                item.strip() for item in values[alias].split(",") if item.strip()
            ]

    try:
        return Settings(**values).require_secrets()
    except PydanticValidationError as e:
        fields = ", ".join(
            str(error["loc"][0]) for error in e.errors() if error.get("loc")
        )
        raise ConfigurationError(f"Invalid or missing settings: {fields}") from e


@lru_cache()
def get_settings() -> Settings:
    """
    获取配置单例

    使用 lru_cache 确保只创建一次

    Returns:
        Settings: 配置对象
    """
    return load_config()
