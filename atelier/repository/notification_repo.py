from __future__ import annotations

from sqlite3 import Connection


def insert_notification(
    conn: Connection,
    notification_id: str,
    order_id: str,
    title: str,
    description: str,
    date: str,
) -> None:
    conn.execute(
        "INSERT INTO notifications(id, orderId, title, description, date, read) VALUES(?,?,?,?,?,0)",
        (notification_id, order_id, title, description, date),
    )


def list_all(conn: Connection):
    return conn.execute(
        "SELECT id, orderId, title, description, date, read FROM notifications ORDER BY date DESC, rowid DESC"
    ).fetchall()


def mark_read(conn: Connection, notification_id: str) -> int:
    cur = conn.execute("UPDATE notifications SET read = 1 WHERE id=?", (notification_id,))
    return cur.rowcount


def list_unread_with_delivery(conn: Connection):
    """未读通知及其订单的交付日期（订单已删除的通知不计入）。"""
    return conn.execute(
        "SELECT n.id, n.orderId, o.deliveryDate FROM notifications n "
        "JOIN orders o ON n.orderId = o.id "
        "WHERE (n.read = 0 OR n.read IS NULL) AND o.deliveryDate IS NOT NULL AND o.deliveryDate != ''"
    ).fetchall()
