import json, logging, sqlite3, sys, time
from typing import Optional

from .domain.reminder_engine import now_local, parse_iso, to_storage
from .errors import WriteError
from .ids import new_id
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

# 审计表独立于五张业务表，reset_schema 不会删除它
DDL = """
CREATE TABLE IF NOT EXISTS operation_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  user TEXT NOT NULL,
  action TEXT NOT NULL,
  entity_type TEXT,
  entity_id TEXT,
  request_id TEXT,
  before_json TEXT,
  after_json TEXT,
  payload_json TEXT,
  result TEXT,
  err_msg TEXT,
  latency_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_log_ts ON operation_log(ts);
CREATE INDEX IF NOT EXISTS idx_log_action ON operation_log(action);
"""

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(settings: Settings | None = None) -> None:
    """Console logging for the CLI and the API process."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.setLevel(level)
    logging.basicConfig(level=level, handlers=[handler], force=True)


def ensure_log_schema(store):
    store.conn.executescript(DDL)


def _dump(obj) -> str | None:
    if obj is None:
        return None
    return json.dumps(obj, ensure_ascii=False, default=str)


class LogContext:
    """
    一次业务操作的审计记录：路由/CLI 在调用服务前创建，服务补充实体与前后快照，
    调用方最后 ``write(result, err)`` 落到 operation_log。
    """

    COLUMNS = (
        "ts", "user", "action", "entity_type", "entity_id", "request_id",
        "before_json", "after_json", "payload_json", "result", "err_msg", "latency_ms",
    )

    def __init__(self, store, action: str, user: str = "owner"):
        self.store = store
        self.action = action
        self.user = user
        self.request_id = new_id()
        self._t0 = time.perf_counter()
        self.entity: tuple[str | None, str | None] = (None, None)
        self.snapshots: dict[str, object] = {"before": None, "after": None, "payload": None}

    def set_entity(self, etype: str, eid: str):
        self.entity = (etype, eid)

    def set_before(self, obj): self.snapshots["before"] = obj
    def set_after(self, obj): self.snapshots["after"] = obj
    def set_payload(self, obj): self.snapshots["payload"] = obj

    @property
    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self._t0) * 1000)

    def record(self, result: str, err: Optional[str]) -> dict:
        etype, eid = self.entity
        return {
            "ts": to_storage(now_local()),
            "user": self.user,
            "action": self.action,
            "entity_type": etype,
            "entity_id": eid,
            "request_id": self.request_id,
            "before_json": _dump(self.snapshots["before"]),
            "after_json": _dump(self.snapshots["after"]),
            "payload_json": _dump(self.snapshots["payload"]),
            "result": result,
            "err_msg": err,
            "latency_ms": self.elapsed_ms,
        }

    def write(self, result: str = "OK", err: Optional[str] = None):
        rec = self.record(result, err)
        if result != "OK":
            logger.warning("%s %s/%s failed: %s", self.action, rec["entity_type"], rec["entity_id"], err)
        cols = ",".join(self.COLUMNS)
        marks = ",".join(f":{c}" for c in self.COLUMNS)
        try:
            self.store.conn.execute(f"INSERT INTO operation_log({cols}) VALUES({marks})", rec)
        except sqlite3.Error as e:
            raise WriteError(f"operation_log: {e}") from e


def _ts_bound(raw: str | None) -> str | None:
    # 与写入时同为 UTC 定宽文本；无法解析的原样比较
    if not raw:
        return None
    d = parse_iso(raw)
    return to_storage(d) if d else raw


def search_operation_logs(store, q: str|None, action: str|None, ts_from: str|None, ts_to: str|None, page:int, size:int):
    """按关键词（快照 JSON 与实体 id）、动作、时间区间过滤；返回 (total, 当前页)。"""
    clauses: list[str] = []
    params: list = []
    if q:
        clauses.append("(payload_json LIKE ? OR before_json LIKE ? OR after_json LIKE ? OR entity_id = ?)")
        params += [f"%{q}%"] * 3 + [q]
    if action:
        clauses.append("action = ?")
        params.append(action)
    lo, hi = _ts_bound(ts_from), _ts_bound(ts_to)
    if lo:
        clauses.append("ts >= ?")
        params.append(lo)
    if hi:
        clauses.append("ts <= ?")
        params.append(hi)
    where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
    page, size = max(page, 1), max(size, 1)
    with store.get_conn() as conn:
        total = conn.execute(f"SELECT COUNT(1) AS cnt FROM operation_log{where}", params).fetchone()["cnt"]
        rows = conn.execute(
            f"SELECT * FROM operation_log{where} ORDER BY ts DESC, id DESC LIMIT ? OFFSET ?",
            [*params, size, (page - 1) * size],
        ).fetchall()
    return total, [dict(r) for r in rows]
