from __future__ import annotations

import logging
from typing import Protocol


class Notifier(Protocol):
    """Local system-notification service. ``schedule`` submits an immediate alert (fire-and-forget)."""

    def schedule(self, title: str, body: str) -> None: ...


class LogNotifier:
    """Default notifier for the API/CLI processes: the alert goes to the application log."""

    def __init__(self, name: str = "atelier.alerts"):
        self._log = logging.getLogger(name)

    def schedule(self, title: str, body: str) -> None:
        self._log.info("[%s] %s", title, body)
