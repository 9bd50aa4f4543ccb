from __future__ import annotations

import logging
import sqlite3

from ..db import Store
from ..errors import SchemaError, WriteError
from ..logs import ensure_log_schema
from ..repository import schema_repo

logger = logging.getLogger(__name__)


def initialize_schema(store: Store) -> None:
    """幂等建表，每次进程启动都可调用。"""
    try:
        schema_repo.create_all(store.conn)
        ensure_log_schema(store)
    except sqlite3.Error as e:
        logger.error("initialize_schema failed on %s: %s", store.db_path, e)
        raise SchemaError(str(e)) from e
    logger.debug("schema ready on %s", store.db_path)


def reset_schema(store: Store, recreate: bool = True) -> None:
    """
    无条件删除五张业务表（数据全部丢失，不可恢复）。
    recreate=True（安全版本）时立即重建空表。
    """
    logger.warning("resetting schema on %s (recreate=%s)", store.db_path, recreate)
    try:
        with store.transaction() as conn:
            schema_repo.drop_all(conn)
    except WriteError as e:
        raise SchemaError(e.message) from e
    if recreate:
        initialize_schema(store)
