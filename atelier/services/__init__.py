"""Function surface consumed by the UI layer.

Every call takes an explicitly constructed :class:`atelier.db.Store`.
"""
from __future__ import annotations

from .schema_svc import initialize_schema, reset_schema
from .order_svc import (
    create_order,
    delete_order_offline,
    get_order_by_id,
    get_unsynced_orders,
    list_orders,
    mark_order_as_delivered,
    mark_order_as_synced,
    mark_order_in_progress,
    order_kpis,
    search_orders,
)
from .notification_svc import count_unread_notifications, get_notifications, mark_notification_as_read
from .reminder_svc import check_delivery_reminders

__all__ = [
    "initialize_schema",
    "reset_schema",
    "create_order",
    "list_orders",
    "get_order_by_id",
    "search_orders",
    "order_kpis",
    "get_unsynced_orders",
    "mark_order_as_synced",
    "mark_order_as_delivered",
    "mark_order_in_progress",
    "delete_order_offline",
    "get_notifications",
    "mark_notification_as_read",
    "count_unread_notifications",
    "check_delivery_reminders",
]
