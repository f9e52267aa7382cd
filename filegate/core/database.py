# -*- coding: utf-8 -*-
"""
数据库模块

包含数据库连接和表结构初始化
"""

import uuid
import sqlite3
import logging
from typing import Optional
from contextlib import contextmanager

from .config import Settings


logger = logging.getLogger(__name__)


# 写锁等待时间（秒），并发写入由 sqlite 自身排队
BUSY_TIMEOUT = 30


class Database:
    """
    数据库连接管理

    每次操作使用独立的连接，事务和 lastrowid 等状态不会在线程之间共享
    """

    def __init__(self, db_path: str):
        """
        初始化数据库

        Args:
            db_path: 数据库文件路径，":memory:" 表示内存数据库
        """
        self.db_path = db_path
        self._uri = False
        self._anchor: Optional[sqlite3.Connection] = None

        if db_path == ":memory:":
            # 共享缓存的内存数据库，保持一个连接打开，否则数据库会被销毁
            self.db_path = f"file:filegate-{uuid.uuid4().hex}?mode=memory&cache=shared"
            self._uri = True
            self._anchor = self.connect()

    def connect(self) -> sqlite3.Connection:
        """
        打开一个新的数据库连接

        Returns:
            sqlite3.Connection: 数据库连接，由调用方负责关闭
        """
        connection = sqlite3.connect(
            self.db_path,
            uri=self._uri,
            timeout=BUSY_TIMEOUT,
            check_same_thread=False
        )
        # 启用外键约束
        connection.execute("PRAGMA foreign_keys = ON")
        # 使用 Row Factory，可以通过列名访问
        connection.row_factory = sqlite3.Row

        return connection

    @property
    def in_memory(self) -> bool:
        return self._uri

    def close(self):
        """关闭内存数据库的保持连接"""
        if self._anchor:
            self._anchor.close()
            self._anchor = None

    @contextmanager
    def get_cursor(self):
        """
        获取数据库游标上下文管理器

        每次调用打开一个连接，退出时提交（或回滚）并关闭

        用法:
            with db.get_cursor() as cursor:
                cursor.execute("SELECT * FROM users")
        """
        conn = self.connect()
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"数据库操作失败: {e}")
            raise
        finally:
            cursor.close()
            conn.close()


def get_database(settings: Settings) -> Database:
    """
    根据配置创建数据库实例

    Args:
        settings: 应用配置

    Returns:
        Database: 数据库实例
    """
    db_url = settings.DATABASE_URL

    if db_url.startswith("sqlite:///"):
        db_path = db_url.replace("sqlite:///", "")
        return Database(db_path)

    raise ValueError(f"不支持的数据库类型: {db_url}")


def init_database(db: Database):
    """
    初始化数据库表结构

    Args:
        db: 数据库实例
    """
    if not db.in_memory:
        # WAL 模式下读操作不阻塞写操作
        connection = db.connect()
        try:
            connection.execute("PRAGMA journal_mode = WAL")
        finally:
            connection.close()

    with db.get_cursor() as cursor:
        # 用户表
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        # 文件表
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS files (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                key TEXT UNIQUE NOT NULL,
                owner_id INTEGER NOT NULL,
                original_name TEXT NOT NULL,
                content_type TEXT NOT NULL,
                size INTEGER NOT NULL,
                storage_ref TEXT NOT NULL,
                uploaded_at TIMESTAMP NOT NULL,
                FOREIGN KEY (owner_id) REFERENCES users(id) ON DELETE CASCADE
            )
        ''')

        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_files_owner
            ON files (owner_id, uploaded_at)
        ''')

    logger.info("数据库表结构初始化完成")
