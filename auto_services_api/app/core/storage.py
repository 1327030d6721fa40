"""
Document-style access to the SQLite tables.

Services never build SQL themselves; they call the six operations
below with plain dictionaries::

    find(table, filters, sort, skip, limit)   -> list of rows
    find_one(table, id)                       -> row or None
    create(table, data)                       -> created row
    update(table, id, patch)                  -> updated row or None
    delete(table, id)                         -> True if a row was removed
    count(table, filters)                     -> int

Filters are ``{field: value}`` for equality or ``{field: {op: value}}``
with ``op`` one of ``eq``, ``gt``, ``gte``, ``lt``, ``lte`` and ``in``.
Values are coerced to the column type, so filters parsed from query
strings compare numerically where the column is numeric.  A filter on a
column the table does not have matches nothing.  Sort keys are
``(field, direction)`` pairs with ``1`` ascending and ``-1`` descending.

Rows come back as dictionaries with booleans restored and JSON columns
decoded.  Any ``sqlite3.Error`` is logged and re-raised as
``UnexpectedError`` so callers never see driver messages.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .db import get_connection
from .errors import UnexpectedError, ValidationError

logger = logging.getLogger(__name__)

# Column name -> python type for every table.  ``list`` marks a JSON column.
TABLES: Dict[str, Dict[str, type]] = {
    "users": {
        "id": int,
        "email": str,
        "name": str,
        "password": str,
        "role": str,
        "phone": str,
        "address": str,
        "created_at": str,
        "updated_at": str,
    },
    "services": {
        "id": int,
        "category": str,
        "title": str,
        "description": str,
        "location": str,
        "price": float,
        "image": str,
        "available": bool,
        "owner_id": int,
        "created_at": str,
        "vehicle_type": str,
        "distance": float,
        "urgency": str,
        "brand": str,
        "model": str,
        "year": int,
        "part_number": str,
        "repair_type": str,
        "estimated_time": str,
        "tools_required": str,
        "car_brand": str,
        "car_model": str,
        "fuel_type": str,
        "transmission": str,
        "rental_duration": str,
    },
    "bookings": {
        "id": int,
        "client_id": int,
        "service_id": int,
        "booking_date": str,
        "status": str,
        "notes": str,
        "created_at": str,
    },
    "orders": {
        "id": int,
        "client_id": int,
        "items": list,
        "total_price": float,
        "status": str,
        "order_date": str,
    },
}

# Column holding the creation time of each table; filled on insert.
CREATED_AT: Dict[str, str] = {
    "users": "created_at",
    "services": "created_at",
    "bookings": "created_at",
    "orders": "order_date",
}

OPERATORS: Dict[str, str] = {
    "eq": "=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}

# SQLite stores integers as signed 64-bit values.
MAX_INTEGER = 2 ** 63 - 1

Filters = Mapping[str, Any]
SortSpec = Sequence[Tuple[str, int]]


def now_iso() -> str:
    """Current UTC time as an ISO string with microseconds."""
    return datetime.now(timezone.utc).isoformat()


def _columns(table: str) -> Dict[str, type]:
    try:
        return TABLES[table]
    except KeyError:
        raise ValueError(f"Unknown table {table}") from None


@contextmanager
def _cursor() -> Iterator[sqlite3.Cursor]:
    conn = get_connection()
    try:
        cursor = conn.cursor()
        yield cursor
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        logger.exception("Storage operation failed")
        raise UnexpectedError() from exc
    finally:
        conn.close()


def _coerce(table: str, field: str, value: Any) -> Any:
    """Convert ``value`` to the storage representation of ``field``."""
    if value is None:
        return None
    kind = _columns(table)[field]
    try:
        if kind is bool:
            if isinstance(value, str):
                return 1 if value.strip().lower() in {"1", "true", "yes"} else 0
            return 1 if value else 0
        if kind is int:
            number = int(value)
            if abs(number) > MAX_INTEGER:
                raise ValueError(number)
            return number
        if kind is float:
            return float(value)
        if kind is list:
            return value if isinstance(value, str) else json.dumps(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid value for {field}") from None
    return str(value) if not isinstance(value, str) else value


def _primary_key(item_id: Any) -> Optional[int]:
    """``item_id`` as an int, or ``None`` when no row could have it."""
    try:
        key = int(item_id)
    except (TypeError, ValueError):
        return None
    return key if abs(key) <= MAX_INTEGER else None


def _decode(table: str, row: sqlite3.Row) -> Dict[str, Any]:
    columns = _columns(table)
    item = dict(row)
    for key, value in item.items():
        kind = columns.get(key)
        if value is None:
            continue
        if kind is bool:
            item[key] = bool(value)
        elif kind is list:
            try:
                item[key] = json.loads(value)
            except (TypeError, ValueError):
                item[key] = []
    return item


def _where(table: str, filters: Optional[Filters]) -> Tuple[str, List[Any]]:
    if not filters:
        return "", []
    columns = _columns(table)
    clauses: List[str] = []
    params: List[Any] = []
    for field, condition in filters.items():
        if field not in columns:
            # Nothing can match a field the documents do not have.
            clauses.append("0 = 1")
            continue
        conditions = condition if isinstance(condition, Mapping) else {"eq": condition}
        for op, value in conditions.items():
            if op == "in":
                values = value.split(",") if isinstance(value, str) else list(value)
                if not values:
                    clauses.append("0 = 1")
                    continue
                placeholders = ", ".join("?" for _ in values)
                clauses.append(f"{field} IN ({placeholders})")
                params.extend(_coerce(table, field, v) for v in values)
            elif op in OPERATORS:
                if value is None and op == "eq":
                    clauses.append(f"{field} IS NULL")
                    continue
                clauses.append(f"{field} {OPERATORS[op]} ?")
                params.append(_coerce(table, field, value))
            else:
                raise ValueError(f"Unsupported filter operator {op}")
    return " WHERE " + " AND ".join(clauses), params


def _order_by(table: str, sort: Optional[SortSpec]) -> str:
    columns = _columns(table)
    parts = [
        f"{field} {'DESC' if direction < 0 else 'ASC'}"
        for field, direction in (sort or ())
        if field in columns
    ]
    if not parts:
        return ""
    # Rows created within the same timestamp still need a stable order.
    if not any(field == "id" for field, _ in sort or ()):
        last_direction = next(d for f, d in reversed(list(sort)) if f in columns)
        parts.append(f"id {'DESC' if last_direction < 0 else 'ASC'}")
    return " ORDER BY " + ", ".join(parts)


def find(
    table: str,
    filters: Optional[Filters] = None,
    sort: Optional[SortSpec] = None,
    skip: int = 0,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Return the rows of ``table`` matching ``filters``."""
    where, params = _where(table, filters)
    query = f"SELECT * FROM {table}{where}{_order_by(table, sort)}"
    skip = min(max(skip, 0), MAX_INTEGER)
    if limit is not None:
        query += " LIMIT ? OFFSET ?"
        params.extend([min(limit, MAX_INTEGER), skip])
    elif skip:
        query += " LIMIT -1 OFFSET ?"
        params.append(skip)
    with _cursor() as cursor:
        rows = cursor.execute(query, tuple(params)).fetchall()
    return [_decode(table, row) for row in rows]


def find_one(table: str, item_id: Any) -> Optional[Dict[str, Any]]:
    """Return the row with primary key ``item_id`` or ``None``."""
    _columns(table)
    key = _primary_key(item_id)
    if key is None:
        return None
    with _cursor() as cursor:
        row = cursor.execute(f"SELECT * FROM {table} WHERE id = ?", (key,)).fetchone()
    return _decode(table, row) if row else None


def find_one_by(table: str, filters: Filters) -> Optional[Dict[str, Any]]:
    """Return the first row matching ``filters`` or ``None``."""
    rows = find(table, filters, limit=1)
    return rows[0] if rows else None


def count(table: str, filters: Optional[Filters] = None) -> int:
    where, params = _where(table, filters)
    with _cursor() as cursor:
        row = cursor.execute(f"SELECT COUNT(*) AS total FROM {table}{where}", tuple(params)).fetchone()
    return int(row["total"]) if row else 0


def create(table: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Insert ``data`` (unknown keys ignored) and return the stored row."""
    columns = _columns(table)
    values = {k: _coerce(table, k, v) for k, v in data.items() if k in columns and k != "id"}
    created_field = CREATED_AT.get(table)
    if created_field and not values.get(created_field):
        values[created_field] = now_iso()
    names = ", ".join(values)
    placeholders = ", ".join("?" for _ in values)
    with _cursor() as cursor:
        cursor.execute(
            f"INSERT INTO {table} ({names}) VALUES ({placeholders})",
            tuple(values.values()),
        )
        new_id = cursor.lastrowid
        row = cursor.execute(f"SELECT * FROM {table} WHERE id = ?", (new_id,)).fetchone()
    return _decode(table, row)


def update(table: str, item_id: Any, patch: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply ``patch`` to one row; returns the updated row or ``None`` if absent."""
    columns = _columns(table)
    values = {k: _coerce(table, k, v) for k, v in patch.items() if k in columns and k != "id"}
    if "updated_at" in columns:
        values["updated_at"] = now_iso()
    existing = find_one(table, item_id)
    if existing is None:
        return None
    if values:
        assignments = ", ".join(f"{name} = ?" for name in values)
        with _cursor() as cursor:
            cursor.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                (*values.values(), existing["id"]),
            )
    return find_one(table, existing["id"])


def delete(table: str, item_id: Any) -> bool:
    _columns(table)
    key = _primary_key(item_id)
    if key is None:
        return False
    with _cursor() as cursor:
        cursor.execute(f"DELETE FROM {table} WHERE id = ?", (key,))
        return cursor.rowcount > 0
