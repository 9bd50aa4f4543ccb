from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    DELIVERED = "delivered"


# 历史版本写入过的各种状态值 -> 规范值
_ALIASES = {
    "new": OrderStatus.NEW,
    "nouvelle": OrderStatus.NEW,
    "in_progress": OrderStatus.IN_PROGRESS,
    "in-progress": OrderStatus.IN_PROGRESS,
    "progress": OrderStatus.IN_PROGRESS,
    "en cours": OrderStatus.IN_PROGRESS,
    "delivered": OrderStatus.DELIVERED,
    "done": OrderStatus.DELIVERED,
    "livrée": OrderStatus.DELIVERED,
    "livree": OrderStatus.DELIVERED,
}

STATUS_LABELS = {
    OrderStatus.NEW: "Nouvelle",
    OrderStatus.IN_PROGRESS: "En cours",
    OrderStatus.DELIVERED: "Livrée",
}


def normalize_status(raw: str | None) -> str:
    """Lower-case and map legacy names; unknown values pass through lower-cased."""
    if raw is None:
        return OrderStatus.NEW.value
    key = str(raw).strip().lower()
    if not key:
        return OrderStatus.NEW.value
    hit = _ALIASES.get(key)
    return hit.value if hit else key


def is_delivered(raw: str | None) -> bool:
    return normalize_status(raw) == OrderStatus.DELIVERED.value


def status_label(raw: str | None) -> str:
    try:
        return STATUS_LABELS[OrderStatus(normalize_status(raw))]
    except ValueError:
        return ""
