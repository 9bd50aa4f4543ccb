from __future__ import annotations

from typing import Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ..db import Store
from ..domain.measures import MEASURES_BY_TYPE, measures_for
from ..errors import AtelierError
from ..logs import LogContext
from ..services import order_svc
from .base import get_store, http_error

router = APIRouter()


class ClientIn(BaseModel):
    name: str
    phone: Optional[str] = None


class MeasurementIn(BaseModel):
    label: str
    value: float


class OrderItemIn(BaseModel):
    clothType: str
    modelImage: Optional[str] = None
    fabricImage: Optional[str] = None
    measurements: List[MeasurementIn] = Field(default_factory=list)


class OrderCreate(BaseModel):
    client: ClientIn
    deliveryDate: Optional[str] = None  # ISO-8601
    orderDate: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    orderItems: List[OrderItemIn]


@router.get("/api/orders")
def api_orders(q: Optional[str] = Query(None), store: Store = Depends(get_store)):
    try:
        items = order_svc.search_orders(store, q) if q else order_svc.list_orders(store)
        return {"items": items}
    except AtelierError as e:
        raise http_error(e)


@router.get("/api/orders/kpis")
def api_order_kpis(store: Store = Depends(get_store)):
    try:
        return order_svc.order_kpis(store)
    except AtelierError as e:
        raise http_error(e)


@router.get("/api/orders/unsynced")
def api_orders_unsynced(store: Store = Depends(get_store)):
    try:
        return {"items": order_svc.get_unsynced_orders(store)}
    except AtelierError as e:
        raise http_error(e)


@router.get("/api/orders/{order_id}")
def api_order_detail(order_id: str, store: Store = Depends(get_store)):
    try:
        order = order_svc.get_order_by_id(store, order_id)
    except AtelierError as e:
        raise http_error(e)
    if order is None:
        raise HTTPException(status_code=404, detail="order_not_found")
    return order


@router.post("/api/orders", status_code=201)
def api_order_create(body: OrderCreate, store: Store = Depends(get_store)):
    log = LogContext(store, "CREATE_ORDER")
    payload = body.model_dump()
    log.set_payload(payload)
    try:
        order_id = order_svc.create_order(store, payload, log)
        log.write("OK")
        return {"message": "ok", "id": order_id}
    except AtelierError as e:
        log.write("ERROR", str(e))
        raise http_error(e)


def _mutate(store: Store, action: str, order_id: str, fn):
    log = LogContext(store, action)
    log.set_entity("ORDER", order_id)
    try:
        found = fn(store, order_id, log)
    except AtelierError as e:
        log.write("ERROR", str(e))
        raise http_error(e)
    if not found:
        log.write("ERROR", "order_not_found")
        raise HTTPException(status_code=404, detail="order_not_found")
    log.write("OK")
    return {"message": "ok"}


@router.post("/api/orders/{order_id}/delivered")
def api_order_delivered(order_id: str, store: Store = Depends(get_store)):
    return _mutate(store, "MARK_DELIVERED", order_id, order_svc.mark_order_as_delivered)


@router.post("/api/orders/{order_id}/in-progress")
def api_order_in_progress(order_id: str, store: Store = Depends(get_store)):
    return _mutate(store, "MARK_IN_PROGRESS", order_id, order_svc.mark_order_in_progress)


@router.post("/api/orders/{order_id}/synced")
def api_order_synced(order_id: str, store: Store = Depends(get_store)):
    try:
        found = order_svc.mark_order_as_synced(store, order_id)
    except AtelierError as e:
        raise http_error(e)
    if not found:
        raise HTTPException(status_code=404, detail="order_not_found")
    return {"message": "ok"}


@router.delete("/api/orders/{order_id}")
def api_order_delete(order_id: str, store: Store = Depends(get_store)):
    return _mutate(store, "DELETE_ORDER", order_id, order_svc.delete_order_offline)


@router.get("/api/measures")
def api_measures(clothType: Optional[str] = None):
    if clothType:
        return {"items": measures_for(clothType)}
    return {"items": {t: measures_for(t) for t in MEASURES_BY_TYPE}}
