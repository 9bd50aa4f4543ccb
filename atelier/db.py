from __future__ import annotations

# atelier/db.py
import sqlite3
from contextlib import contextmanager
from typing import Iterator
import os

from .errors import ReadError, WriteError
from .settings import PROJECT_ROOT, read_config_yaml

# DB 路径解析顺序：
# 1) 环境变量 ATELIER_DB_PATH（最高优先级）
# 2) config.yaml 的 test_db_path（当检测到测试环境时）
# 3) config.yaml 的 db_path（生产默认）
# 4) 兜底：项目根 atelier.db
_ROOT_DB = os.path.join(PROJECT_ROOT, "atelier.db")

MEMORY = ":memory:"


def get_db_path(_: str | None = None) -> str:
    env_path = os.environ.get("ATELIER_DB_PATH")
    cfg = read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    if path != MEMORY:
        # 确保目录存在
        dirn = os.path.dirname(path) or "."
        os.makedirs(dirn, exist_ok=True)
    return path


def _connect(path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(
        path,
        check_same_thread=False,
        isolation_level=None,
    )
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.row_factory = sqlite3.Row
    return conn


class Store:
    """
    单一 SQLite 连接的持有者，显式构造并向下传递（不使用模块级单例）。
    ``Store(":memory:")`` 为每个测试提供隔离的内存库。
    连接处于 autocommit 模式；多语句写入通过 :meth:`transaction` 包裹。
    """

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or get_db_path()
        self._conn: sqlite3.Connection | None = _connect(self.db_path)

    @classmethod
    def in_memory(cls) -> "Store":
        return cls(MEMORY)

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ReadError(f"store closed: {self.db_path}")
        return self._conn

    @contextmanager
    def get_conn(self) -> Iterator[sqlite3.Connection]:
        """读取用连接；sqlite 错误统一转为 ReadError。"""
        try:
            yield self.conn
        except sqlite3.Error as e:
            raise ReadError(str(e)) from e

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """BEGIN ... COMMIT；任何异常都 ROLLBACK 后继续抛出。"""
        conn = self.conn
        try:
            # BEGIN / COMMIT 本身也可能失败（如 database is locked）
            conn.execute("BEGIN")
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise WriteError(str(e)) from e
        except BaseException:
            conn.rollback()
            raise

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
