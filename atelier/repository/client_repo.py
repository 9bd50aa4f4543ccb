from __future__ import annotations

from sqlite3 import Connection


def insert_client(conn: Connection, client_id: str, name: str, phone: str | None, created_at: str) -> None:
    conn.execute(
        "INSERT INTO clients(id, name, phone, createdAt, synced) VALUES(?,?,?,?,0)",
        (client_id, name, phone, created_at),
    )
