from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from .. import __version__
from ..db import Store
from ..errors import AtelierError, ErrorKind

router = APIRouter()


def get_store(request: Request) -> Store:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="store_unavailable")
    return store


def http_error(e: AtelierError) -> HTTPException:
    code = 400 if e.kind == ErrorKind.VALIDATION else 500
    return HTTPException(status_code=code, detail=str(e))


@router.get("/health")
def health(request: Request):
    schema_error = getattr(request.app.state, "schema_error", None)
    if schema_error:
        return {"status": "degraded", "detail": schema_error}
    return {"status": "ok"}


@router.get("/version")
def version():
    return {"app": "atelier-api", "version": __version__}
