from __future__ import annotations

from sqlite3 import Connection

# 五张业务表；列名与移动端本地库保持一致（camelCase）
TABLES: dict[str, str] = {
    "clients": """
        CREATE TABLE IF NOT EXISTS clients (
            id TEXT PRIMARY KEY,
            name TEXT,
            phone TEXT,
            createdAt TEXT,
            synced INTEGER DEFAULT 0
        )
    """,
    "orders": """
        CREATE TABLE IF NOT EXISTS orders (
            id TEXT PRIMARY KEY,
            status TEXT,
            orderDate TEXT,
            deliveryDate TEXT,
            notes TEXT,
            clientId TEXT REFERENCES clients(id),
            lastReminderDate TEXT,
            synced INTEGER DEFAULT 0
        )
    """,
    "order_items": """
        CREATE TABLE IF NOT EXISTS order_items (
            id TEXT PRIMARY KEY,
            clothType TEXT,
            modelImage TEXT,
            fabricImage TEXT,
            orderId TEXT REFERENCES orders(id)
        )
    """,
    "measurements": """
        CREATE TABLE IF NOT EXISTS measurements (
            id TEXT PRIMARY KEY,
            label TEXT,
            value REAL,
            orderItemId TEXT REFERENCES order_items(id)
        )
    """,
    # orderId 为弱引用：删除订单后通知保留，因此不声明外键
    "notifications": """
        CREATE TABLE IF NOT EXISTS notifications (
            id TEXT PRIMARY KEY,
            orderId TEXT,
            title TEXT,
            description TEXT,
            date TEXT,
            read INTEGER DEFAULT 0
        )
    """,
}

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_orders_client ON orders(clientId)",
    "CREATE INDEX IF NOT EXISTS idx_orders_date ON orders(orderDate)",
    "CREATE INDEX IF NOT EXISTS idx_items_order ON order_items(orderId)",
    "CREATE INDEX IF NOT EXISTS idx_measurements_item ON measurements(orderItemId)",
    "CREATE INDEX IF NOT EXISTS idx_notifications_order ON notifications(orderId)",
]

# 依赖顺序：子表先删
DROP_ORDER = ["notifications", "measurements", "order_items", "orders", "clients"]


def create_all(conn: Connection) -> None:
    for ddl in TABLES.values():
        conn.execute(ddl)
    for ddl in INDEXES:
        conn.execute(ddl)


def drop_all(conn: Connection) -> None:
    for t in DROP_ORDER:
        conn.execute(f"DROP TABLE IF EXISTS {t}")


def existing_tables(conn: Connection) -> set[str]:
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    return {r["name"] for r in rows}


def table_columns(conn: Connection, table: str) -> list[str]:
    return [r["name"] for r in conn.execute(f"PRAGMA table_info({table})").fetchall()]
