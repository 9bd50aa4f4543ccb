import os
import sys
import pytest
from datetime import datetime
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

# Never pick up a developer's config.yaml / database during tests
os.environ["ATELIER_CONFIG"] = str(_THIS_DIR / "__no_config__.yaml")
os.environ.pop("ATELIER_DB_PATH", None)

from atelier.db import Store
from atelier.services.schema_svc import initialize_schema
from atelier.settings import Settings, get_settings

get_settings.cache_clear()


class RecordingNotifier:
    def __init__(self, fail_for: str | None = None):
        self.sent: list[tuple[str, str]] = []
        self.fail_for = fail_for

    def schedule(self, title: str, body: str) -> None:
        if self.fail_for and self.fail_for in body:
            raise RuntimeError("notification service unavailable")
        self.sent.append((title, body))


@pytest.fixture()
def store():
    # 每个测试一个隔离的内存库
    s = Store.in_memory()
    initialize_schema(s)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def settings():
    return Settings()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def make_notifier():
    return RecordingNotifier


@pytest.fixture()
def now():
    # 固定在六月上午，避开夏令时切换与午夜边界
    return datetime(2026, 6, 10, 9, 0, 0).astimezone()


@pytest.fixture()
def order_input():
    def _make(name="Marie Kouassi", phone="0700000000", delivery=None, order_date=None, items=None, **extra):
        data = {
            "client": {"name": name, "phone": phone},
            "deliveryDate": delivery.isoformat() if isinstance(delivery, datetime) else delivery,
            "orderDate": order_date.isoformat() if isinstance(order_date, datetime) else order_date,
            "notes": "",
            "orderItems": items if items is not None else [
                {"clothType": "robe", "measurements": [{"label": "chest", "value": 92}]},
            ],
        }
        data.update(extra)
        return data
    return _make


@pytest.fixture()
def client(store, notifier):
    from fastapi.testclient import TestClient
    from atelier.api import app, init_state

    # 不进入 with 块：startup 不会触发，直接注入测试库
    app.state.notifier = notifier
    init_state(app, store)
    try:
        yield TestClient(app)
    finally:
        app.state.store = None
        app.state.notifier = None
        app.state.schema_error = None
