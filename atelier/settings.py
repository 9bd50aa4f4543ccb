from __future__ import annotations

# atelier/settings.py
import os
from dataclasses import dataclass
from functools import lru_cache

import yaml

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

DEDUP_CALENDAR_DAY = "calendar_day"
DEDUP_ROLLING = "rolling"


def read_config_yaml(path: str | None = None) -> dict:
    cfg_path = path or os.environ.get("ATELIER_CONFIG") or os.path.join(PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(cfg, dict):
        return {}
    out = {}
    for k, v in cfg.items():
        if isinstance(v, str):
            v = v.strip()
            if not v:
                continue
        out[k] = v
    return out


@dataclass
class Settings:
    reminder_window_days: float = 5
    reminder_dedup: str = DEDUP_CALENDAR_DAY
    reminder_cooldown_hours: float = 20
    notify_on_create: bool = False
    log_level: str = "INFO"


def _as_bool(v) -> bool:
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def load_settings(path: str | None = None) -> Settings:
    cfg = read_config_yaml(path)
    defaults = Settings()
    dedup = str(cfg.get("reminder_dedup", defaults.reminder_dedup)).lower()
    if dedup not in (DEDUP_CALENDAR_DAY, DEDUP_ROLLING):
        dedup = DEDUP_CALENDAR_DAY
    return Settings(
        reminder_window_days=float(cfg.get("reminder_window_days", defaults.reminder_window_days)),
        reminder_dedup=dedup,
        reminder_cooldown_hours=float(cfg.get("reminder_cooldown_hours", defaults.reminder_cooldown_hours)),
        notify_on_create=_as_bool(cfg.get("notify_on_create", defaults.notify_on_create)),
        log_level=(os.environ.get("ATELIER_LOG_LEVEL") or str(cfg.get("log_level", defaults.log_level))).upper(),
    )


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
