from __future__ import annotations

import os

import pandas as pd

from ..db import Store
from .order_svc import list_orders

ORDER_COLUMNS = ["id", "orderDate", "deliveryDate", "status", "clientName", "clientPhone", "clothTypes", "items", "notes"]
MEASURE_COLUMNS = ["orderId", "clientName", "itemId", "clothType", "label", "displayLabel", "value"]


def build_report(store: Store) -> tuple[pd.DataFrame, pd.DataFrame]:
    """订单汇总表 + 测量明细表（均按 list_orders 的顺序）。"""
    orders = list_orders(store)
    order_rows = []
    measure_rows = []
    for o in orders:
        order_rows.append({
            "id": o["id"],
            "orderDate": o["orderDate"],
            "deliveryDate": o["deliveryDate"],
            "status": o["status"],
            "clientName": o["clientName"],
            "clientPhone": o["clientPhone"],
            "clothTypes": ", ".join(it["clothType"] for it in o["orderItems"]),
            "items": len(o["orderItems"]),
            "notes": o["notes"],
        })
        for it in o["orderItems"]:
            for m in it["measurements"]:
                measure_rows.append({
                    "orderId": o["id"],
                    "clientName": o["clientName"],
                    "itemId": it["id"],
                    "clothType": it["clothType"],
                    "label": m["label"],
                    "displayLabel": m["displayLabel"],
                    "value": m["value"],
                })
    return (
        pd.DataFrame(order_rows, columns=ORDER_COLUMNS),
        pd.DataFrame(measure_rows, columns=MEASURE_COLUMNS),
    )


def export_report(store: Store, out_dir: str, stamp: str) -> list[str]:
    orders_df, measures_df = build_report(store)
    os.makedirs(out_dir, exist_ok=True)
    paths = [
        os.path.join(out_dir, f"orders_{stamp}.csv"),
        os.path.join(out_dir, f"measurements_{stamp}.csv"),
    ]
    orders_df.to_csv(paths[0], index=False, encoding="utf-8-sig")
    measures_df.to_csv(paths[1], index=False, encoding="utf-8-sig")
    return paths
