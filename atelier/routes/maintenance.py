from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from ..db import Store
from ..errors import AtelierError
from ..logs import LogContext
from ..services.schema_svc import reset_schema
from .base import get_store

router = APIRouter()


@router.post("/api/maintenance/reset")
def api_reset(
    request: Request,
    confirm: bool = Body(False, embed=True),
    recreate: bool = Body(True, embed=True),
    store: Store = Depends(get_store),
):
    if not confirm:
        raise HTTPException(status_code=400, detail="confirm_required")
    log = LogContext(store, "RESET_SCHEMA")
    log.set_payload({"recreate": recreate})
    try:
        reset_schema(store, recreate=recreate)
    except AtelierError as e:
        request.app.state.schema_error = str(e)
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=f"重置失败: {e}")
    request.app.state.schema_error = None
    log.write("OK")
    return {"message": "ok", "recreated": recreate}
