from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from ..db import Store
from ..domain.reminder_engine import now_local, parse_iso
from ..repository import notification_repo
from ..settings import Settings, get_settings


def get_notifications(store: Store) -> list[dict[str, Any]]:
    with store.get_conn() as conn:
        rows = [dict(r) for r in notification_repo.list_all(conn)]
    for r in rows:
        r["read"] = int(r["read"] or 0)
    return rows


def mark_notification_as_read(store: Store, notification_id: str) -> bool:
    with store.transaction() as conn:
        return bool(notification_repo.mark_read(conn, notification_id))


def count_unread_notifications(store: Store, now: datetime | None = None, settings: Settings | None = None) -> int:
    """角标计数：未读且所属订单交付日期在 now + 窗口 之内。"""
    settings = settings or get_settings()
    now = now or now_local()
    horizon = now + timedelta(days=settings.reminder_window_days)
    with store.get_conn() as conn:
        rows = notification_repo.list_unread_with_delivery(conn)
    n = 0
    for r in rows:
        d = parse_iso(r["deliveryDate"])
        if d is not None and d <= horizon:
            n += 1
    return n
