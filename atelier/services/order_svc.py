from __future__ import annotations

import logging
from math import isfinite
from typing import Any

from ..db import Store
from ..domain.measures import display_label
from ..domain.reminder_engine import NEW_ORDER_TITLE, compose_new_order, now_local, parse_iso, to_storage
from ..domain.status import OrderStatus, normalize_status, status_label
from ..errors import ValidationError
from ..ids import new_id
from ..logs import LogContext
from ..repository import client_repo, item_repo, measurement_repo, notification_repo, order_repo
from ..settings import Settings, get_settings

logger = logging.getLogger(__name__)

_VALID_STATUSES = {s.value for s in OrderStatus}


# ---------------- input normalisation ----------------

def _text_or_none(v) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def _to_value(raw, where: str) -> float:
    if isinstance(raw, bool):
        raise ValidationError(f"{where}: value must be numeric")
    try:
        val = float(str(raw).strip().replace(",", ".")) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{where}: value must be numeric, got {raw!r}")
    if not isfinite(val):
        raise ValidationError(f"{where}: value must be finite")
    return val


def _check_iso(raw, field: str, required: bool) -> str | None:
    s = _text_or_none(raw)
    if s is None:
        if required:
            raise ValidationError(f"{field} is required")
        return None
    d = parse_iso(s)
    if d is None:
        raise ValidationError(f"{field} must be an ISO-8601 date, got {s!r}")
    # 统一存为 UTC 定宽文本，ORDER BY 文本序即时间序
    return to_storage(d)


def _normalize_input(data: dict) -> dict:
    client = data.get("client") or {}
    name = _text_or_none(client.get("name"))
    if not name:
        raise ValidationError("client.name is required")

    status = normalize_status(data.get("status"))
    if status not in _VALID_STATUSES:
        raise ValidationError(f"unsupported status {data.get('status')!r}")

    raw_items = data.get("orderItems") or []
    if not raw_items:
        raise ValidationError("orderItems must not be empty")

    items = []
    for i, it in enumerate(raw_items):
        cloth = _text_or_none(it.get("clothType"))
        if not cloth:
            raise ValidationError(f"orderItems[{i}].clothType is required")
        measurements = []
        for j, m in enumerate(it.get("measurements") or []):
            where = f"orderItems[{i}].measurements[{j}]"
            label = _text_or_none(m.get("label"))
            if not label:
                raise ValidationError(f"{where}.label is required")
            measurements.append({"label": label, "value": _to_value(m.get("value"), where)})
        items.append({
            "clothType": cloth,
            "modelImage": _text_or_none(it.get("modelImage")),
            "fabricImage": _text_or_none(it.get("fabricImage")),
            "measurements": measurements,
        })

    return {
        "client": {"name": name, "phone": _text_or_none(client.get("phone"))},
        "status": status,
        "orderDate": _check_iso(data.get("orderDate"), "orderDate", required=False),
        "deliveryDate": _check_iso(data.get("deliveryDate"), "deliveryDate", required=False),
        "notes": _text_or_none(data.get("notes")),
        "orderItems": items,
    }


# ---------------- writer ----------------

def create_order(store: Store, data: dict, log: LogContext | None = None, settings: Settings | None = None) -> str:
    """
    一次事务内写入 client + order + items + measurements（可选：新订单通知）。
    任一步失败整体回滚并抛出 WriteError；返回新订单 id。
    """
    settings = settings or get_settings()
    d = _normalize_input(data)
    now = to_storage(now_local())
    client_id = new_id()
    order_id = new_id()

    with store.transaction() as conn:
        # 1) 客户（每个订单新建一个客户行）
        client_repo.insert_client(conn, client_id, d["client"]["name"], d["client"]["phone"], now)
        # 2) 订单
        order_repo.insert_order(
            conn, order_id, client_id, d["status"], d["orderDate"] or now, d["deliveryDate"], d["notes"],
        )
        # 3) 服装条目及其测量值，保持输入顺序
        for it in d["orderItems"]:
            item_id = new_id()
            item_repo.insert_item(conn, item_id, order_id, it["clothType"], it["modelImage"], it["fabricImage"])
            for m in it["measurements"]:
                measurement_repo.insert_measurement(conn, new_id(), item_id, m["label"], m["value"])
        # 4) 新订单通知
        if settings.notify_on_create:
            body = compose_new_order(
                d["client"]["name"],
                [it["clothType"] for it in d["orderItems"]],
                parse_iso(d["deliveryDate"]),
            )
            notification_repo.insert_notification(conn, new_id(), order_id, NEW_ORDER_TITLE, body, now)

    logger.info("order %s created for %s (%d item(s))", order_id, d["client"]["name"], len(d["orderItems"]))
    if log:
        log.set_entity("ORDER", order_id)
        log.set_after({"order_id": order_id, "client_id": client_id, "items": len(d["orderItems"])})
    return order_id


# ---------------- reader ----------------

def _build_items(conn, order_id: str) -> list[dict[str, Any]]:
    out = []
    for item in item_repo.list_for_order(conn, order_id):
        measurements = [
            {
                "id": m["id"],
                "label": m["label"],
                "displayLabel": display_label(m["label"]),
                "value": float(m["value"]) if m["value"] is not None else None,
                "orderItemId": m["orderItemId"],
            }
            for m in measurement_repo.list_for_item(conn, item["id"])
        ]
        out.append({
            "id": item["id"],
            "clothType": item["clothType"],
            "modelImage": item["modelImage"] or None,
            "fabricImage": item["fabricImage"] or None,
            "measurements": measurements,
        })
    return out


def _build_order(conn, row) -> dict[str, Any]:
    order = dict(row)
    # 读取边界统一规范化状态值（历史数据可能是 NEW / progress / done / livrée）
    order["status"] = normalize_status(order.get("status"))
    order["statusLabel"] = status_label(order["status"])
    order["orderItems"] = _build_items(conn, order["id"])
    return order


def list_orders(store: Store) -> list[dict[str, Any]]:
    with store.get_conn() as conn:
        return [_build_order(conn, r) for r in order_repo.list_with_client(conn)]


def get_order_by_id(store: Store, order_id: str) -> dict[str, Any] | None:
    with store.get_conn() as conn:
        row = order_repo.get_with_client(conn, order_id)
        if not row:
            return None
        return _build_order(conn, row)


def search_orders(store: Store, query: str | None) -> list[dict[str, Any]]:
    """按客户名、电话、服装类型、下单日期做不区分大小写的过滤。"""
    orders = list_orders(store)
    q = (query or "").strip().lower()
    if not q:
        return orders

    def _haystack(o: dict) -> str:
        parts = [o.get("clientName") or "", o.get("clientPhone") or "", o.get("orderDate") or ""]
        parts += [it["clothType"] or "" for it in o["orderItems"]]
        return " ".join(parts).lower()

    return [o for o in orders if q in _haystack(o)]


def order_kpis(store: Store) -> dict[str, int]:
    with store.get_conn() as conn:
        statuses = [normalize_status(s) for s in order_repo.list_statuses(conn)]
    return {
        "total": len(statuses),
        "new": statuses.count(OrderStatus.NEW.value),
        "in_progress": statuses.count(OrderStatus.IN_PROGRESS.value),
        "delivered": statuses.count(OrderStatus.DELIVERED.value),
    }


def get_unsynced_orders(store: Store) -> list[dict[str, Any]]:
    with store.get_conn() as conn:
        rows = [dict(r) for r in order_repo.list_unsynced(conn)]
    for r in rows:
        r["status"] = normalize_status(r.get("status"))
    return rows


# ---------------- mutations ----------------

def _set_status(store: Store, order_id: str, status: OrderStatus, log: LogContext | None) -> bool:
    with store.transaction() as conn:
        updated = order_repo.update_status(conn, order_id, status.value)
    if log:
        log.set_entity("ORDER", order_id)
        log.set_after({"status": status.value, "found": bool(updated)})
    if not updated:
        logger.info("status update to %s: order %s not found", status.value, order_id)
    return bool(updated)


def mark_order_as_delivered(store: Store, order_id: str, log: LogContext | None = None) -> bool:
    """幂等：重复调用仍是 delivered，不报错。返回订单是否存在。"""
    return _set_status(store, order_id, OrderStatus.DELIVERED, log)


def mark_order_in_progress(store: Store, order_id: str, log: LogContext | None = None) -> bool:
    return _set_status(store, order_id, OrderStatus.IN_PROGRESS, log)


def mark_order_as_synced(store: Store, order_id: str) -> bool:
    with store.transaction() as conn:
        return bool(order_repo.update_synced(conn, order_id, 1))


def delete_order_offline(store: Store, order_id: str, log: LogContext | None = None) -> bool:
    """
    按依赖顺序删除：measurements -> order_items -> orders。
    客户与通知行保留（孤儿行属预期行为）。
    """
    with store.transaction() as conn:
        if log:
            row = order_repo.get_with_client(conn, order_id)
            log.set_before(dict(row) if row else None)
        m = measurement_repo.delete_for_order(conn, order_id)
        i = item_repo.delete_for_order(conn, order_id)
        o = order_repo.delete(conn, order_id)
    if log:
        log.set_entity("ORDER", order_id)
        log.set_after({"orders": o, "items": i, "measurements": m})
    logger.info("order %s deleted (%d item(s), %d measurement(s))", order_id, i, m)
    return bool(o)
