from __future__ import annotations

from sqlite3 import Connection


def insert_item(
    conn: Connection,
    item_id: str,
    order_id: str,
    cloth_type: str,
    model_image: str | None,
    fabric_image: str | None,
) -> None:
    conn.execute(
        "INSERT INTO order_items(id, clothType, modelImage, fabricImage, orderId) VALUES(?,?,?,?,?)",
        (item_id, cloth_type, model_image, fabric_image, order_id),
    )


def list_for_order(conn: Connection, order_id: str):
    # rowid 即插入顺序
    return conn.execute(
        "SELECT id, clothType, modelImage, fabricImage, orderId FROM order_items "
        "WHERE orderId=? ORDER BY rowid ASC",
        (order_id,),
    ).fetchall()


def list_cloth_types(conn: Connection, order_id: str) -> list[str]:
    rows = conn.execute(
        "SELECT clothType FROM order_items WHERE orderId=? ORDER BY rowid ASC",
        (order_id,),
    ).fetchall()
    return [r["clothType"] for r in rows]


def delete_for_order(conn: Connection, order_id: str) -> int:
    cur = conn.execute("DELETE FROM order_items WHERE orderId=?", (order_id,))
    return cur.rowcount
