from datetime import datetime, timedelta

from atelier.api import app, init_state
from atelier.db import Store
from atelier.errors import SchemaError


def _payload(name="Marie Kouassi", days=3, **extra):
    delivery = datetime.now().astimezone() + timedelta(days=days)
    body = {
        "client": {"name": name, "phone": "0700000000"},
        "deliveryDate": delivery.isoformat(),
        "orderItems": [
            {"clothType": "robe", "measurements": [{"label": "chest", "value": 92}, {"label": "hip", "value": "98.5"}]},
        ],
    }
    body.update(extra)
    return body


def test_health_and_version(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/version").json()["app"] == "atelier-api"


def test_health_degraded_when_schema_fails(client, monkeypatch):
    def boom(store):
        raise SchemaError("disk full")

    monkeypatch.setattr("atelier.api.initialize_schema", boom)
    s = Store.in_memory()
    try:
        init_state(app, s)
        body = client.get("/health").json()
        assert body["status"] == "degraded"
        assert "disk full" in body["detail"]
    finally:
        s.close()


def test_create_list_detail(client):
    r = client.post("/api/orders", json=_payload())
    assert r.status_code == 201
    oid = r.json()["id"]

    items = client.get("/api/orders").json()["items"]
    assert [o["id"] for o in items] == [oid]

    detail = client.get(f"/api/orders/{oid}").json()
    assert detail["clientName"] == "Marie Kouassi"
    assert detail["status"] == "new"
    ms = detail["orderItems"][0]["measurements"]
    assert [(m["label"], m["value"]) for m in ms] == [("chest", 92.0), ("hip", 98.5)]


def test_detail_unknown_is_404(client):
    assert client.get("/api/orders/nope").status_code == 404


def test_validation_error_is_400_and_logged(client):
    r = client.post("/api/orders", json=_payload(orderItems=[]))
    assert r.status_code == 400
    assert r.json()["detail"].startswith("validation:")
    logs = client.get("/api/logs/search", params={"action": "CREATE_ORDER"}).json()
    assert logs["total"] == 1
    assert logs["items"][0]["result"] == "ERROR"


def test_missing_client_is_rejected_by_body_model(client):
    body = _payload()
    del body["client"]
    assert client.post("/api/orders", json=body).status_code == 422


def test_search_and_kpis(client):
    client.post("/api/orders", json=_payload(name="Marie Kouassi"))
    client.post("/api/orders", json=_payload(name="Awa Traoré"))
    found = client.get("/api/orders", params={"q": "awa"}).json()["items"]
    assert [o["clientName"] for o in found] == ["Awa Traoré"]
    assert client.get("/api/orders/kpis").json() == {"total": 2, "new": 2, "in_progress": 0, "delivered": 0}


def test_status_transitions_and_delete(client):
    oid = client.post("/api/orders", json=_payload()).json()["id"]

    assert client.post(f"/api/orders/{oid}/in-progress").status_code == 200
    assert client.get(f"/api/orders/{oid}").json()["status"] == "in_progress"
    assert client.post(f"/api/orders/{oid}/delivered").status_code == 200
    assert client.get(f"/api/orders/{oid}").json()["statusLabel"] == "Livrée"
    assert client.post("/api/orders/nope/delivered").status_code == 404

    assert client.delete(f"/api/orders/{oid}").status_code == 200
    assert client.get(f"/api/orders/{oid}").status_code == 404
    assert client.delete(f"/api/orders/{oid}").status_code == 404

    actions = [i["action"] for i in client.get("/api/logs/search", params={"size": 50}).json()["items"]]
    assert {"CREATE_ORDER", "MARK_IN_PROGRESS", "MARK_DELIVERED", "DELETE_ORDER"} <= set(actions)

    deleted = client.get("/api/logs/search", params={"action": "DELETE_ORDER", "query": "Marie"}).json()
    assert deleted["total"] == 1
    assert deleted["items"][0]["entity_id"] == oid


def test_sync_endpoints(client):
    oid = client.post("/api/orders", json=_payload()).json()["id"]
    assert [o["id"] for o in client.get("/api/orders/unsynced").json()["items"]] == [oid]
    assert client.post(f"/api/orders/{oid}/synced").status_code == 200
    assert client.get("/api/orders/unsynced").json()["items"] == []
    assert client.post("/api/orders/nope/synced").status_code == 404


def test_reminder_check_and_notifications(client, notifier):
    near = client.post("/api/orders", json=_payload(name="Near", days=3)).json()["id"]
    client.post("/api/orders", json=_payload(name="Far", days=12))

    r = client.post("/api/reminders/check").json()
    assert r == {"reminded": [near], "count": 1}
    assert len(notifier.sent) == 1
    # 同一天再次检查不重复提醒
    assert client.post("/api/reminders/check").json()["count"] == 0

    notes = client.get("/api/notifications").json()["items"]
    assert len(notes) == 1 and notes[0]["orderId"] == near
    assert client.get("/api/notifications/unread-count").json() == {"count": 1}

    assert client.post(f"/api/notifications/{notes[0]['id']}/read").status_code == 200
    assert client.get("/api/notifications/unread-count").json() == {"count": 0}
    assert client.post("/api/notifications/nope/read").status_code == 404


def test_measures_catalogue(client):
    robe = client.get("/api/measures", params={"clothType": "robe"}).json()["items"]
    assert [m["label"] for m in robe] == ["Poitrine", "Taille", "Hanche", "Longueur"]
    everything = client.get("/api/measures").json()["items"]
    assert set(everything) == {"chemise", "pantalon", "robe", "veste"}


def test_reset_requires_confirmation(client):
    client.post("/api/orders", json=_payload())
    assert client.post("/api/maintenance/reset", json={}).status_code == 400
    assert len(client.get("/api/orders").json()["items"]) == 1

    r = client.post("/api/maintenance/reset", json={"confirm": True})
    assert r.status_code == 200
    assert client.get("/api/orders").json()["items"] == []


def test_read_failures_report_error_kind(client, store):
    store.close()
    for path in (
        "/api/orders",
        "/api/orders/kpis",
        "/api/orders/unsynced",
        "/api/orders/some-id",
        "/api/notifications",
        "/api/notifications/unread-count",
        "/api/logs/search",
    ):
        r = client.get(path)
        assert r.status_code == 500, path
        assert r.json()["detail"].startswith("read:"), path
    r = client.post("/api/orders/some-id/synced")
    assert r.status_code == 500
    assert r.json()["detail"].startswith("read:")
