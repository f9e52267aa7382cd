# -*- coding: utf-8 -*-
"""
FileGate 启动脚本

用于启动 FileGate 文件存储网关
"""

import sys

import uvicorn

from filegate.core.config import get_settings
from filegate.core.exceptions import ConfigurationError


def main():
    """主函数"""
    # 缺少密钥时直接退出，不启动服务
    try:
        settings = get_settings().require_secrets()
    except ConfigurationError as e:
        print(f"配置错误: {e}", file=sys.stderr)
        sys.exit(1)

    print("\n" + "=" * 50)
    print(f"{settings.PROJECT_NAME} - {settings.DESCRIPTION}")
    print("=" * 50)
    print(f"服务地址: http://{settings.HOST}:{settings.PORT}")
    print(f"API 文档: http://{settings.HOST}:{settings.PORT}/docs")
    print(f"存储后端: {settings.STORAGE_BACKEND}")
    print("=" * 50 + "\n")

    uvicorn.run(
        "filegate.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        ssl_keyfile=settings.SSL_KEYFILE,
        ssl_certfile=settings.SSL_CERTFILE,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
