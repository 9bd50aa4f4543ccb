from __future__ import annotations

import uuid


def new_id() -> str:
    """所有主键统一使用随机 UUID4 文本；删除后不回收。"""
    return str(uuid.uuid4())
