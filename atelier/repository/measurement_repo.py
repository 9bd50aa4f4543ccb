from __future__ import annotations

from sqlite3 import Connection


def insert_measurement(conn: Connection, measurement_id: str, item_id: str, label: str, value: float) -> None:
    conn.execute(
        "INSERT INTO measurements(id, label, value, orderItemId) VALUES(?,?,?,?)",
        (measurement_id, label, value, item_id),
    )


def list_for_item(conn: Connection, item_id: str):
    return conn.execute(
        "SELECT id, label, value, orderItemId FROM measurements WHERE orderItemId=? ORDER BY rowid ASC",
        (item_id,),
    ).fetchall()


def delete_for_order(conn: Connection, order_id: str) -> int:
    cur = conn.execute(
        "DELETE FROM measurements WHERE orderItemId IN (SELECT id FROM order_items WHERE orderId=?)",
        (order_id,),
    )
    return cur.rowcount
