"""
交付提醒扫描。

每次应用回到前台时调用 :func:`check_delivery_reminders`。对每个未交付且交付日期在
(now, now + 窗口] 内的订单，当天最多提醒一次：推送系统通知、写入通知历史、
记录 lastReminderDate。每个订单独立读-改-写，单个订单失败只记日志，不影响其余订单。
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..db import Store
from ..domain.reminder_engine import (
    REMINDER_TITLE,
    compose_reminder,
    in_window,
    now_local,
    parse_iso,
    reminded_recently,
    to_local,
    to_storage,
)
from ..domain.status import is_delivered
from ..errors import AtelierError, ReminderError
from ..ids import new_id
from ..providers.notifier import LogNotifier, Notifier
from ..repository import item_repo, notification_repo, order_repo
from ..settings import Settings, get_settings

logger = logging.getLogger(__name__)


def _remind_one(store: Store, notifier: Notifier, row, delivery: datetime, now: datetime) -> None:
    with store.get_conn() as conn:
        cloth_types = item_repo.list_cloth_types(conn, row["id"])
    message = compose_reminder(row["clientName"] or "", cloth_types, delivery, now)

    try:
        notifier.schedule(REMINDER_TITLE, message)
    except Exception as e:
        raise ReminderError(f"notifier failed for order {row['id']}: {e}") from e

    stamp = to_storage(now)
    with store.transaction() as conn:
        order_repo.update_last_reminder(conn, row["id"], stamp)
        notification_repo.insert_notification(conn, new_id(), row["id"], REMINDER_TITLE, message, stamp)


def check_delivery_reminders(
    store: Store,
    notifier: Notifier | None = None,
    now: datetime | None = None,
    settings: Settings | None = None,
) -> list[str]:
    """Returns the ids of the orders reminded during this sweep."""
    settings = settings or get_settings()
    notifier = notifier or LogNotifier()
    now = to_local(now) if now else now_local()
    window = timedelta(days=settings.reminder_window_days)
    cooldown = timedelta(hours=settings.reminder_cooldown_hours)

    with store.get_conn() as conn:
        candidates = order_repo.list_with_delivery_date(conn)

    reminded: list[str] = []
    for row in candidates:
        if is_delivered(row["status"]):
            continue
        delivery = parse_iso(row["deliveryDate"])
        if delivery is None:
            logger.warning("order %s: unparseable deliveryDate %r", row["id"], row["deliveryDate"])
            continue
        if not in_window(delivery, now, window):
            continue
        if reminded_recently(parse_iso(row["lastReminderDate"]), now, settings.reminder_dedup, cooldown):
            continue
        try:
            _remind_one(store, notifier, row, delivery, now)
        except AtelierError:
            logger.exception("reminder for order %s failed, continuing sweep", row["id"])
            continue
        reminded.append(row["id"])

    if reminded:
        logger.info("delivery reminders sent for %d order(s)", len(reminded))
    return reminded
