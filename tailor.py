#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tailoring workshop order store (SQLite, offline)

Commands:
  init                Create the tables (safe to run on every start)
  reset               Drop all business tables and recreate them (irreversible)
  add-order           Add an order from a JSON file (client + items + measurements)
  list                Print orders, most recent first
  deliver             Mark an order as delivered
  remind              Run the delivery-reminder sweep once
  report              Export orders and measurements (CSV) and print them to console

Notes:
- DB path comes from config.yaml (`db_path`) or the ATELIER_DB_PATH env var.
- Reminders are written to the notification history; alerts go to the log.
"""

import argparse
import datetime as dt
import json
import os
import sys

import pandas as pd

from atelier.db import Store
from atelier.errors import AtelierError
from atelier.logs import LogContext, setup_logging
from atelier.services import (
    check_delivery_reminders,
    create_order,
    initialize_schema,
    list_orders,
    mark_order_as_delivered,
    reset_schema,
    search_orders,
)
from atelier.services.report_svc import build_report, export_report
from atelier.settings import load_settings


def open_store(args) -> Store:
    store = Store(args.db) if args.db else Store()
    initialize_schema(store)
    return store


# ---------------- Commands ----------------

def cmd_init(args):
    with open_store(args) as store:
        print("DB initialized:", store.db_path)


def cmd_reset(args):
    if not args.yes:
        raise SystemExit("Refusing to reset without --yes (all data will be lost)")
    with open_store(args) as store:
        log = LogContext(store, "RESET_SCHEMA", user="cli")
        reset_schema(store, recreate=True)
        log.write("OK")
        print("All tables dropped and recreated.")


def cmd_add_order(args):
    with open(args.file, "r", encoding="utf-8") as f:
        data = json.load(f)
    with open_store(args) as store:
        log = LogContext(store, "CREATE_ORDER", user="cli")
        log.set_payload(data)
        try:
            order_id = create_order(store, data, log, settings=args.settings)
        except AtelierError as e:
            log.write("ERROR", str(e))
            raise SystemExit(str(e))
        log.write("OK")
        print("Order created:", order_id)


def cmd_list(args):
    with open_store(args) as store:
        orders = search_orders(store, args.q) if args.q else list_orders(store)
    if not orders:
        print("(empty)")
        return
    for o in orders:
        clothes = ", ".join(it["clothType"] for it in o["orderItems"])
        print(f"{(o['orderDate'] or '')[:10]}  {o['status']:<11} {o['clientName']} ({o['clientPhone'] or '-'})  "
              f"[{clothes}]  -> {o['deliveryDate'] or '-'}  {o['id']}")


def cmd_deliver(args):
    with open_store(args) as store:
        log = LogContext(store, "MARK_DELIVERED", user="cli")
        found = mark_order_as_delivered(store, args.id, log)
        log.write("OK" if found else "ERROR", None if found else "order_not_found")
    if not found:
        raise SystemExit(f"Order not found: {args.id}")
    print("Order delivered:", args.id)


def cmd_remind(args):
    with open_store(args) as store:
        reminded = check_delivery_reminders(store, settings=args.settings)
    print(f"Reminders sent: {len(reminded)}")


def cmd_report(args):
    stamp = dt.datetime.now().strftime("%Y%m%d")
    with open_store(args) as store:
        orders_df, measures_df = build_report(store)

        pd.set_option("display.max_rows", 200)
        pd.set_option("display.width", 160)

        print("\n=== Orders ===")
        if not orders_df.empty:
            print(orders_df[["orderDate", "status", "clientName", "clothTypes", "deliveryDate"]])
        else:
            print("(empty)")

        print("\n=== Measurements ===")
        if not measures_df.empty:
            print(measures_df[["clientName", "clothType", "displayLabel", "value"]])
        else:
            print("(none)")

        out_dir = args.out or os.path.join(os.path.dirname(os.path.abspath(__file__)), "exports")
        export_report(store, out_dir, stamp)
    print(f"\nCSV exported to {out_dir}")


# ---------------- Entry ----------------

def main(argv=None):
    parser = argparse.ArgumentParser(description="Tailoring workshop order store (SQLite)")
    parser.add_argument("--config", default=None, help="path to config.yaml")
    parser.add_argument("--db", default=None, help="override database path")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create tables")
    p_init.set_defaults(func=cmd_init)

    p_reset = sub.add_parser("reset", help="drop and recreate all tables")
    p_reset.add_argument("--yes", action="store_true")
    p_reset.set_defaults(func=cmd_reset)

    p_add = sub.add_parser("add-order", help="add an order from a JSON file")
    p_add.add_argument("file")
    p_add.set_defaults(func=cmd_add_order)

    p_list = sub.add_parser("list", help="list orders")
    p_list.add_argument("-q", default=None, help="filter by client, phone, cloth type or date")
    p_list.set_defaults(func=cmd_list)

    p_deliver = sub.add_parser("deliver", help="mark an order as delivered")
    p_deliver.add_argument("id")
    p_deliver.set_defaults(func=cmd_deliver)

    p_remind = sub.add_parser("remind", help="run the delivery reminder sweep")
    p_remind.set_defaults(func=cmd_remind)

    p_rep = sub.add_parser("report", help="export orders and measurements")
    p_rep.add_argument("--out", default=None, help="output directory (default ./exports)")
    p_rep.set_defaults(func=cmd_report)

    args = parser.parse_args(argv)
    if args.config:
        os.environ["ATELIER_CONFIG"] = args.config
    args.settings = load_settings(args.config)
    setup_logging(args.settings)

    if hasattr(args, "func"):
        try:
            args.func(args)
        except AtelierError as e:
            print(f"error: {e}", file=sys.stderr)
            raise SystemExit(1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
