import json
from datetime import datetime, timedelta

import pytest

import tailor


@pytest.fixture()
def db(tmp_path):
    return str(tmp_path / "cli.db")


def _order_file(tmp_path, name="Marie Kouassi"):
    delivery = datetime.now().astimezone() + timedelta(days=2)
    path = tmp_path / f"{name.split()[0].lower()}.json"
    path.write_text(json.dumps({
        "client": {"name": name, "phone": "0700000000"},
        "deliveryDate": delivery.isoformat(),
        "orderItems": [{"clothType": "robe", "measurements": [{"label": "chest", "value": 92}]}],
    }), encoding="utf-8")
    return str(path)


def test_add_list_remind_deliver(tmp_path, db, capsys):
    tailor.main(["--db", db, "add-order", _order_file(tmp_path)])
    oid = capsys.readouterr().out.strip().split()[-1]

    tailor.main(["--db", db, "list"])
    out = capsys.readouterr().out
    assert "Marie Kouassi" in out and oid in out and "[robe]" in out

    tailor.main(["--db", db, "remind"])
    assert "Reminders sent: 1" in capsys.readouterr().out
    tailor.main(["--db", db, "remind"])
    assert "Reminders sent: 0" in capsys.readouterr().out

    tailor.main(["--db", db, "deliver", oid])
    assert "Order delivered" in capsys.readouterr().out
    tailor.main(["--db", db, "list", "-q", "marie"])
    assert "delivered" in capsys.readouterr().out


def test_deliver_unknown_order_exits(db):
    with pytest.raises(SystemExit):
        tailor.main(["--db", db, "deliver", "nope"])


def test_invalid_order_file_exits(tmp_path, db):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"client": {"name": "A"}, "orderItems": []}), encoding="utf-8")
    with pytest.raises(SystemExit) as ei:
        tailor.main(["--db", db, "add-order", str(bad)])
    assert "validation" in str(ei.value)


def test_reset_requires_yes(db):
    with pytest.raises(SystemExit):
        tailor.main(["--db", db, "reset"])


def test_report_exports_csv(tmp_path, db, capsys):
    tailor.main(["--db", db, "add-order", _order_file(tmp_path)])
    out_dir = tmp_path / "exports"
    tailor.main(["--db", db, "report", "--out", str(out_dir)])
    out = capsys.readouterr().out
    assert "=== Orders ===" in out and "Poitrine" in out
    assert len(list(out_dir.glob("*.csv"))) == 2
