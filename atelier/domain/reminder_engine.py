from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

REMINDER_TITLE = "Rappel livraison"
NEW_ORDER_TITLE = "Nouvelle commande"

_WEEKDAYS_FR = ["lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"]
_MONTHS_FR = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]


def parse_iso(value: str | None) -> datetime | None:
    """ISO-8601 text -> aware local datetime; naive values are taken as local time."""
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    # 移动端写入 toISOString() 格式（末尾 Z），3.10 的 fromisoformat 不认
    if s[-1] in "Zz":
        s = s[:-1] + "+00:00"
    try:
        d = datetime.fromisoformat(s)
    except ValueError:
        return None
    return d.astimezone()


def to_storage(d: datetime) -> str:
    """
    Canonical stored form: UTC, millisecond precision, e.g. ``2026-06-10T07:00:00.000+00:00``.
    Fixed width, so text order is chronological order.
    """
    return d.astimezone(timezone.utc).isoformat(timespec="milliseconds")


def now_local() -> datetime:
    return datetime.now().astimezone()


def to_local(d: datetime) -> datetime:
    return d.astimezone()


def in_window(delivery: datetime, now: datetime, window: timedelta) -> bool:
    """Strictly in the future and at most ``window`` away; past deliveries never qualify."""
    diff = delivery - now
    return timedelta(0) < diff <= window


def reminded_recently(
    last: datetime | None,
    now: datetime,
    mode: str = "calendar_day",
    cooldown: timedelta = timedelta(hours=20),
) -> bool:
    """
    Dedup check for one order.

    ``calendar_day``: same local calendar date as ``now``.
    ``rolling``: less than ``cooldown`` elapsed since ``last``.
    """
    if last is None:
        return False
    if mode == "rolling":
        return timedelta(0) <= now - last < cooldown
    return to_local(last).date() == to_local(now).date()


def days_left(delivery: datetime, now: datetime) -> int:
    return math.ceil((delivery - now) / timedelta(days=1))


def format_long_date_fr(d: datetime) -> str:
    """``jeudi 22 octobre`` / ``jeudi 1 octobre``（与 fr-FR 长日期一致）"""
    d = to_local(d)
    return f"{_WEEKDAYS_FR[d.weekday()]} {d.day} {_MONTHS_FR[d.month - 1]}"


def distinct_in_order(values: list[str | None]) -> list[str]:
    seen: dict[str, None] = {}
    for v in values:
        if v and v not in seen:
            seen[v] = None
    return list(seen)


def compose_reminder(client_name: str, cloth_types: list[str], delivery: datetime, now: datetime) -> str:
    n = days_left(delivery, now)
    clothes = ", ".join(distinct_in_order(cloth_types)) or "sans article"
    return (
        f"⚠️ Livraison dans {n} jour(s) : La commande de {client_name} ({clothes}) "
        f"doit être livrée le {format_long_date_fr(delivery)}. Veuillez finaliser les retouches si nécessaire."
    )


def compose_new_order(client_name: str, cloth_types: list[str], delivery: datetime | None) -> str:
    clothes = ", ".join(distinct_in_order(cloth_types)) or "sans article"
    when = f", livraison le {format_long_date_fr(delivery)}" if delivery else ""
    return f"Commande enregistrée pour {client_name} ({clothes}){when}."
