"""In-memory stand-in for the supabase AsyncClient query builder.

Covers the subset of the postgrest chain the ledger services use: select (with count="exact"), eq / neq / in_ /
gt / gte / lt / lte / not_.is_, order (multiple keys), range, limit, insert, update, upsert and delete.
Filters on update/delete are evaluated per row at execute time, the same way a conditional UPDATE behaves.
A counted select whose range starts past the end raises RangeNotSatisfiable, as PostgREST does.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import copy
import uuid


@dataclass
class FakeResponse:
    data: List[dict]
    count: Optional[int] = None


class StoreUnavailable(Exception):
    pass


class RangeNotSatisfiable(Exception):
    """PostgREST 416: a counted select whose range starts past the last matching row"""


def _comparable(value: Any) -> Any:
    """Timestamps are compared as instants, everything else as-is"""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and len(value) >= 19 and value[4] == "-" and value[10] == "T":
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        except ValueError:
            return value
    return value


def _equal(left: Any, right: Any) -> bool:
    return _comparable(left) == _comparable(right)


class _Negation:
    def __init__(self, query: "FakeQuery"):
        self._query = query

    def is_(self, column: str, value: str) -> "FakeQuery":
        return self._query._add_filter(column, lambda v: not (v is None if value == "null" else v == value))

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self._query._add_filter(column, lambda v: not _equal(v, value))


class FakeQuery:
    def __init__(self, store: "FakeSupabase", table: str):
        self._store = store
        self._table = table
        self._action = "select"
        self._columns = "*"
        self._count: Optional[str] = None
        self._payload: Any = None
        self._on_conflict: Optional[str] = None
        self._filters: List[Callable[[dict], bool]] = []
        self._orders: List[tuple] = []
        self._range: Optional[tuple] = None
        self._limit: Optional[int] = None

    # ---- actions -------------------------------------------------------------------

    def select(self, columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self._action = "select"
        self._columns = columns
        self._count = count
        return self

    def insert(self, payload) -> "FakeQuery":
        self._action = "insert"
        self._payload = payload
        return self

    def update(self, payload: dict) -> "FakeQuery":
        self._action = "update"
        self._payload = payload
        return self

    def upsert(self, payload, on_conflict: str = "id") -> "FakeQuery":
        self._action = "upsert"
        self._payload = payload
        self._on_conflict = on_conflict
        return self

    def delete(self) -> "FakeQuery":
        self._action = "delete"
        return self

    # ---- filters -------------------------------------------------------------------

    def _add_filter(self, column: str, predicate: Callable[[Any], bool]) -> "FakeQuery":
        self._filters.append(lambda row: predicate(row.get(column)))
        return self

    @property
    def not_(self) -> _Negation:
        return _Negation(self)

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self._add_filter(column, lambda v: _equal(v, value))

    def neq(self, column: str, value: Any) -> "FakeQuery":
        return self._add_filter(column, lambda v: not _equal(v, value))

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        wanted = [_comparable(value) for value in values]
        return self._add_filter(column, lambda v: _comparable(v) in wanted)

    def is_(self, column: str, value: str) -> "FakeQuery":
        return self._add_filter(column, lambda v: v is None if value == "null" else v == value)

    def gt(self, column: str, value: Any) -> "FakeQuery":
        return self._add_filter(column, lambda v: v is not None and _comparable(v) > _comparable(value))

    def gte(self, column: str, value: Any) -> "FakeQuery":
        return self._add_filter(column, lambda v: v is not None and _comparable(v) >= _comparable(value))

    def lt(self, column: str, value: Any) -> "FakeQuery":
        return self._add_filter(column, lambda v: v is not None and _comparable(v) < _comparable(value))

    def lte(self, column: str, value: Any) -> "FakeQuery":
        return self._add_filter(column, lambda v: v is not None and _comparable(v) <= _comparable(value))

    # ---- modifiers -----------------------------------------------------------------

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._orders.append((column, desc))
        return self

    def range(self, start: int, end: int) -> "FakeQuery":
        self._range = (start, end)
        return self

    def limit(self, size: int) -> "FakeQuery":
        self._limit = size
        return self

    # ---- execution -----------------------------------------------------------------

    def _matches(self, row: dict) -> bool:
        return all(predicate(row) for predicate in self._filters)

    def _project(self, row: dict) -> dict:
        if self._columns.strip() == "*":
            return copy.deepcopy(row)
        columns = [column.strip() for column in self._columns.split(",")]
        return {column: copy.deepcopy(row.get(column)) for column in columns}

    def _new_row(self, payload: dict) -> dict:
        row = copy.deepcopy(payload)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self._store.now.isoformat())
        return row

    def _run_select(self) -> FakeResponse:
        rows = [row for row in self._store.rows(self._table) if self._matches(row)]

        # apply the last key first so earlier keys win, relying on sort stability
        for column, desc in reversed(self._orders):
            present = [row for row in rows if row.get(column) is not None]
            missing = [row for row in rows if row.get(column) is None]
            present.sort(key=lambda row: _comparable(row.get(column)), reverse=desc)
            rows = present + missing

        count = len(rows) if self._count else None
        if self._range is not None:
            start, end = self._range
            if count is not None and start > 0 and start >= count:
                raise RangeNotSatisfiable(f"range {start}-{end} of {count} rows on {self._table}")
            rows = rows[start : end + 1]
        if self._limit is not None:
            rows = rows[: self._limit]

        return FakeResponse(data=[self._project(row) for row in rows], count=count)

    async def execute(self) -> FakeResponse:
        self._store.calls.append((self._table, self._action))
        if self._table in self._store.failing_tables:
            raise StoreUnavailable(f"{self._table} is unavailable")

        table = self._store.rows(self._table)

        if self._action == "select":
            return self._run_select()

        if self._action == "insert":
            payloads = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = [self._new_row(payload) for payload in payloads]
            table.extend(inserted)
            return FakeResponse(data=copy.deepcopy(inserted))

        if self._action == "update":
            updated = []
            for row in table:
                if self._matches(row):
                    row.update(copy.deepcopy(self._payload))
                    updated.append(copy.deepcopy(row))
            return FakeResponse(data=updated)

        if self._action == "upsert":
            payloads = self._payload if isinstance(self._payload, list) else [self._payload]
            written = []
            for payload in payloads:
                existing = next((row for row in table if _equal(row.get(self._on_conflict), payload.get(self._on_conflict))), None)
                if existing is not None:
                    existing.update(copy.deepcopy(payload))
                    written.append(copy.deepcopy(existing))
                else:
                    row = self._new_row(payload)
                    table.append(row)
                    written.append(copy.deepcopy(row))
            return FakeResponse(data=written)

        if self._action == "delete":
            removed = [row for row in table if self._matches(row)]
            self._store.tables[self._table] = [row for row in table if not self._matches(row)]
            return FakeResponse(data=copy.deepcopy(removed))

        raise ValueError(f"Unsupported action {self._action}")


class FakeSupabase:
    """Tables are plain lists of dicts; tests seed them directly and inspect them afterwards"""

    def __init__(self, now: Optional[datetime] = None):
        self.tables: Dict[str, List[dict]] = {}
        self.failing_tables: set = set()
        self.calls: List[tuple] = []
        self.now = now or datetime.now(timezone.utc)

    def rows(self, table: str) -> List[dict]:
        return self.tables.setdefault(table, [])

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, *rows: dict) -> List[dict]:
        stored = [FakeQuery(self, table)._new_row(row) for row in rows]
        self.rows(table).extend(stored)
        return stored
