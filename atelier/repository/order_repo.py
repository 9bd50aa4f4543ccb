from __future__ import annotations

from sqlite3 import Connection

_WITH_CLIENT = (
    "SELECT o.id, o.status, o.orderDate, o.deliveryDate, o.notes, o.clientId, "
    "o.lastReminderDate, o.synced, c.name AS clientName, c.phone AS clientPhone "
    "FROM orders o JOIN clients c ON c.id = o.clientId"
)


def insert_order(
    conn: Connection,
    order_id: str,
    client_id: str,
    status: str,
    order_date: str,
    delivery_date: str | None,
    notes: str | None,
) -> None:
    conn.execute(
        "INSERT INTO orders(id, status, orderDate, deliveryDate, notes, clientId, lastReminderDate, synced) "
        "VALUES(?,?,?,?,?,?,NULL,0)",
        (order_id, status, order_date, delivery_date, notes, client_id),
    )


def list_with_client(conn: Connection):
    return conn.execute(_WITH_CLIENT + " ORDER BY o.orderDate DESC, o.rowid DESC").fetchall()


def get_with_client(conn: Connection, order_id: str):
    return conn.execute(_WITH_CLIENT + " WHERE o.id=?", (order_id,)).fetchone()


def list_unsynced(conn: Connection):
    return conn.execute(
        "SELECT id, status, orderDate, deliveryDate, notes, clientId, lastReminderDate, synced "
        "FROM orders WHERE synced = 0 ORDER BY orderDate DESC"
    ).fetchall()


def list_with_delivery_date(conn: Connection):
    """提醒候选：有交付日期的订单（状态过滤在服务层做，以兼容历史状态值）。"""
    return conn.execute(
        _WITH_CLIENT + " WHERE o.deliveryDate IS NOT NULL AND o.deliveryDate != '' ORDER BY o.deliveryDate ASC"
    ).fetchall()


def list_statuses(conn: Connection) -> list[str | None]:
    return [r["status"] for r in conn.execute("SELECT status FROM orders").fetchall()]


def update_status(conn: Connection, order_id: str, status: str) -> int:
    cur = conn.execute("UPDATE orders SET status=? WHERE id=?", (status, order_id))
    return cur.rowcount


def update_synced(conn: Connection, order_id: str, synced: int = 1) -> int:
    cur = conn.execute("UPDATE orders SET synced=? WHERE id=?", (synced, order_id))
    return cur.rowcount


def update_last_reminder(conn: Connection, order_id: str, ts: str) -> None:
    conn.execute("UPDATE orders SET lastReminderDate=? WHERE id=?", (ts, order_id))


def delete(conn: Connection, order_id: str) -> int:
    cur = conn.execute("DELETE FROM orders WHERE id=?", (order_id,))
    return cur.rowcount
