from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ..db import Store
from ..errors import AtelierError
from ..logs import LogContext
from ..providers.notifier import LogNotifier
from ..services import notification_svc, reminder_svc
from .base import get_store, http_error

router = APIRouter()


@router.get("/api/notifications")
def api_notifications(store: Store = Depends(get_store)):
    try:
        return {"items": notification_svc.get_notifications(store)}
    except AtelierError as e:
        raise http_error(e)


@router.get("/api/notifications/unread-count")
def api_notifications_unread(store: Store = Depends(get_store)):
    try:
        return {"count": notification_svc.count_unread_notifications(store)}
    except AtelierError as e:
        raise http_error(e)


@router.post("/api/notifications/{notification_id}/read")
def api_notification_read(notification_id: str, store: Store = Depends(get_store)):
    try:
        found = notification_svc.mark_notification_as_read(store, notification_id)
    except AtelierError as e:
        raise http_error(e)
    if not found:
        raise HTTPException(status_code=404, detail="notification_not_found")
    return {"message": "ok"}


@router.post("/api/reminders/check")
def api_reminders_check(request: Request, store: Store = Depends(get_store)):
    log = LogContext(store, "CHECK_REMINDERS")
    notifier = getattr(request.app.state, "notifier", None) or LogNotifier()
    try:
        reminded = reminder_svc.check_delivery_reminders(store, notifier)
    except AtelierError as e:
        log.write("ERROR", str(e))
        raise http_error(e)
    log.set_after({"reminded": reminded})
    log.write("OK")
    return {"reminded": reminded, "count": len(reminded)}
