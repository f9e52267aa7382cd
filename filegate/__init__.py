# -*- coding: utf-8 -*-
"""
FileGate - 带认证的文件存储网关

版本: v0.1.0
"""

__version__ = "0.1.0"
__description__ = "带认证的文件存储网关，只有文件所有者可以读取文件"
