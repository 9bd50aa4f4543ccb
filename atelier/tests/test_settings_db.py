import pytest

from atelier.db import Store, get_db_path
from atelier.errors import ReadError, WriteError
from atelier.settings import DEDUP_CALENDAR_DAY, DEDUP_ROLLING, Settings, load_settings


def test_load_settings_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.delenv("ATELIER_LOG_LEVEL", raising=False)
    s = load_settings(str(tmp_path / "missing.yaml"))
    assert s == Settings()


def test_load_settings_from_yaml(tmp_path, monkeypatch):
    monkeypatch.delenv("ATELIER_LOG_LEVEL", raising=False)
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "reminder_window_days: 3\n"
        "reminder_dedup: rolling\n"
        "reminder_cooldown_hours: 12\n"
        "notify_on_create: yes\n"
        "log_level: debug\n",
        encoding="utf-8",
    )
    s = load_settings(str(cfg))
    assert s.reminder_window_days == 3
    assert s.reminder_dedup == DEDUP_ROLLING
    assert s.reminder_cooldown_hours == 12
    assert s.notify_on_create is True
    assert s.log_level == "DEBUG"


def test_unknown_dedup_mode_falls_back(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("reminder_dedup: weekly\n", encoding="utf-8")
    assert load_settings(str(cfg)).reminder_dedup == DEDUP_CALENDAR_DAY


def test_log_level_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("ATELIER_LOG_LEVEL", "warning")
    assert load_settings(str(tmp_path / "missing.yaml")).log_level == "WARNING"


def test_db_path_resolution(tmp_path, monkeypatch):
    target = tmp_path / "data" / "shop.db"
    monkeypatch.setenv("ATELIER_DB_PATH", str(target))
    assert get_db_path() == str(target)
    assert (tmp_path / "data").is_dir()

    monkeypatch.delenv("ATELIER_DB_PATH")
    cfg = tmp_path / "config.yaml"
    cfg.write_text(f"db_path: {tmp_path / 'prod.db'}\ntest_db_path: {tmp_path / 'test.db'}\n", encoding="utf-8")
    monkeypatch.setenv("ATELIER_CONFIG", str(cfg))
    # pytest 运行期间 PYTEST_CURRENT_TEST 已设置
    assert get_db_path() == str(tmp_path / "test.db")


def test_file_store_persists_between_connections(tmp_path, order_input):
    from atelier.services import create_order, initialize_schema, list_orders

    path = str(tmp_path / "atelier.db")
    with Store(path) as s:
        initialize_schema(s)
        oid = create_order(s, order_input())
    with Store(path) as s:
        initialize_schema(s)
        assert [o["id"] for o in list_orders(s)] == [oid]


def test_transaction_rolls_back_on_error(store):
    with pytest.raises(WriteError):
        with store.transaction() as conn:
            conn.execute("INSERT INTO clients(id, name, phone, createdAt, synced) VALUES('c1','A',NULL,'x',0)")
            conn.execute("INSERT INTO clients(id, name, phone, createdAt, synced) VALUES('c1','B',NULL,'x',0)")
    with store.get_conn() as conn:
        assert conn.execute("SELECT COUNT(1) FROM clients").fetchone()[0] == 0


def test_transaction_rolls_back_on_non_sqlite_error(store):
    with pytest.raises(KeyError):
        with store.transaction() as conn:
            conn.execute("INSERT INTO clients(id, name, phone, createdAt, synced) VALUES('c1','A',NULL,'x',0)")
            raise KeyError("boom")
    with store.get_conn() as conn:
        assert conn.execute("SELECT COUNT(1) FROM clients").fetchone()[0] == 0


def test_closed_store_raises_read_error():
    s = Store.in_memory()
    s.close()
    with pytest.raises(ReadError):
        with s.get_conn() as conn:
            conn.execute("SELECT 1")


def test_transaction_begin_failure_is_a_write_error(store):
    conn = store.conn
    conn.execute("BEGIN")
    # 已有未结束事务时再次 BEGIN 会被 sqlite 拒绝
    with pytest.raises(WriteError):
        with store.transaction():
            pass
    assert not conn.in_transaction
