"""
catering/core/db.py — Record Store

Four logical tables (Settings, Menu, Quotes, Sequence) kept in one SQLite
file. Cells are stored as TEXT the way a spreadsheet stores them; callers
parse numbers and booleans with catering.core.parsing.

Rows are addressed by a stable synthetic `id`. Spreadsheet-style positions
(1 = header row, 2 = first data row) exist only at this boundary, for
export_table() and position_of(), and are never handed to business logic.

TABLES:
  settings  — Label | Value
  menu      — Category | Name | Pickup Price | Delivery Price
  quotes    — Quote ID | Created At | Customer Name | ... | Event Time
  sequence  — Name | Value
"""

import os
import sqlite3
import logging
import threading
from contextlib import contextmanager

from .errors import NotFoundError
from .parsing import to_number
from .paths import DB_PATH

log = logging.getLogger("catering.db")

_db_lock = threading.Lock()

# ── Table layout ──────────────────────────────────────────────────────────────
# (header text, column name) in sheet order. Header text and column order
# are what external tools reading the raw tables depend on.
TABLES = {
    "Settings": [
        ("Label", "label"),
        ("Value", "value"),
    ],
    "Menu": [
        ("Category", "category"),
        ("Name", "name"),
        ("Pickup Price", "pickup_price"),
        ("Delivery Price", "delivery_price"),
    ],
    "Quotes": [
        ("Quote ID", "quote_id"),
        ("Created At", "created_at"),
        ("Customer Name", "customer_name"),
        ("Contact Name", "contact_name"),
        ("Order Type", "order_type"),
        ("Delivery Address", "delivery_address"),
        ("Line Items", "line_items"),
        ("Subtotal", "subtotal"),
        ("Tax Rate", "tax_rate"),
        ("Tax Amount", "tax_amount"),
        ("Total", "total"),
        ("Tax Exempt", "tax_exempt"),
        ("Location", "location_name"),
        ("Customer Email", "customer_email"),
        ("Event Time", "event_time"),
    ],
    "Sequence": [
        ("Name", "name"),
        ("Value", "value"),
    ],
}


def _sql_name(table: str) -> str:
    if table not in TABLES:
        raise NotFoundError(f"Table not found: {table}")
    return table.lower()


def columns(table: str) -> list:
    _sql_name(table)
    return [col for _, col in TABLES[table]]


def headers(table: str) -> list:
    _sql_name(table)
    return [hdr for hdr, _ in TABLES[table]]


def _build_schema() -> str:
    parts = []
    for table, cols in TABLES.items():
        body = ",\n    ".join(f"{col:<16} TEXT DEFAULT ''" for _, col in cols)
        parts.append(
            f"CREATE TABLE IF NOT EXISTS {table.lower()} (\n"
            f"    id              INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            f"    {body}\n);")
    parts.append("CREATE INDEX IF NOT EXISTS idx_quotes_quote_id ON quotes(quote_id);")
    parts.append("CREATE INDEX IF NOT EXISTS idx_settings_label ON settings(label);")
    return "\n\n".join(parts)


SCHEMA = _build_schema()


# ── Connection factory ────────────────────────────────────────────────────────
@contextmanager
def get_db():
    """Thread-safe SQLite connection with WAL mode for multi-worker gunicorn."""
    with _db_lock:
        os.makedirs(os.path.dirname(DB_PATH) or ".", exist_ok=True)
        conn = sqlite3.connect(DB_PATH, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


def init_db():
    """Create all tables if they don't exist. Safe to call multiple times."""
    with get_db() as conn:
        conn.executescript(SCHEMA)
    log.info("DB initialized at %s", DB_PATH)
    return True


def _cell(value) -> str:
    if value is None:
        return ""
    return str(value)


def _row_dict(row) -> dict:
    return {k: row[k] for k in row.keys()}


# ── Table operations ─────────────────────────────────────────────────────────
def read_table(table: str) -> list:
    """All data rows in storage order (header excluded), as dicts with `id`."""
    name = _sql_name(table)
    with get_db() as conn:
        rows = conn.execute(f"SELECT * FROM {name} ORDER BY id").fetchall()
    return [_row_dict(r) for r in rows]


def read_rows(table: str, limit: int) -> list:
    """The first `limit` data rows in storage order."""
    name = _sql_name(table)
    with get_db() as conn:
        rows = conn.execute(f"SELECT * FROM {name} ORDER BY id LIMIT ?",
                            (limit,)).fetchall()
    return [_row_dict(r) for r in rows]


def get_row(table: str, row_id: int) -> dict:
    name = _sql_name(table)
    with get_db() as conn:
        row = conn.execute(f"SELECT * FROM {name} WHERE id=?", (row_id,)).fetchone()
    if not row:
        raise NotFoundError(f"{table} row {row_id} not found")
    return _row_dict(row)


def append_row(table: str, row: dict) -> int:
    """Append a row; missing columns are stored blank. Returns the new id."""
    name = _sql_name(table)
    cols = columns(table)
    with get_db() as conn:
        cur = conn.execute(
            f"INSERT INTO {name} ({', '.join(cols)}) VALUES ({', '.join('?' * len(cols))})",
            [_cell(row.get(c)) for c in cols])
        return cur.lastrowid


def update_row(table: str, row_id: int, row: dict) -> bool:
    """Overwrite every column of an existing row."""
    name = _sql_name(table)
    cols = columns(table)
    with get_db() as conn:
        cur = conn.execute(
            f"UPDATE {name} SET {', '.join(f'{c}=?' for c in cols)} WHERE id=?",
            [_cell(row.get(c)) for c in cols] + [row_id])
        if cur.rowcount == 0:
            raise NotFoundError(f"{table} row {row_id} not found")
    return True


def delete_row(table: str, row_id: int) -> bool:
    """Delete a row by id. Returns False when no such row exists."""
    name = _sql_name(table)
    with get_db() as conn:
        cur = conn.execute(f"DELETE FROM {name} WHERE id=?", (row_id,))
        return cur.rowcount > 0


def read_cell(table: str, key_column: str, key: str, column: str, default=None):
    """Value of `column` in the first row whose `key_column` equals `key`."""
    name = _sql_name(table)
    cols = columns(table)
    if key_column not in cols or column not in cols:
        raise NotFoundError(f"Column not found in {table}")
    with get_db() as conn:
        row = conn.execute(
            f"SELECT {column} FROM {name} WHERE {key_column}=? ORDER BY id LIMIT 1",
            (key,)).fetchone()
    return row[0] if row else default


def write_cell(table: str, row_id: int, column: str, value) -> bool:
    """Write a single cell. Returns False when the row does not exist."""
    name = _sql_name(table)
    if column not in columns(table):
        raise NotFoundError(f"Column not found in {table}: {column}")
    with get_db() as conn:
        cur = conn.execute(f"UPDATE {name} SET {column}=? WHERE id=?",
                           (_cell(value), row_id))
        return cur.rowcount > 0


def increment_counter(table: str, key: str) -> int:
    """Atomically add 1 to a key/value counter row and return the new value.

    BEGIN IMMEDIATE takes SQLite's write lock before the read, so two
    processes sharing the file cannot both read the same old value.
    """
    name = _sql_name(table)
    with get_db() as conn:
        conn.execute("BEGIN IMMEDIATE")
        row = conn.execute(
            f"SELECT id, value FROM {name} WHERE name=? ORDER BY id LIMIT 1",
            (key,)).fetchone()
        current = int(to_number(row["value"])) if row else 0
        new = current + 1
        if row:
            conn.execute(f"UPDATE {name} SET value=? WHERE id=?", (str(new), row["id"]))
        else:
            conn.execute(f"INSERT INTO {name} (name, value) VALUES (?, ?)", (key, str(new)))
    return new


# ── Raw sheet view ───────────────────────────────────────────────────────────
def position_of(table: str, row_id: int) -> int:
    """1-indexed sheet position of a row (the header is position 1)."""
    name = _sql_name(table)
    with get_db() as conn:
        exists = conn.execute(f"SELECT 1 FROM {name} WHERE id=?", (row_id,)).fetchone()
        if not exists:
            raise NotFoundError(f"{table} row {row_id} not found")
        before = conn.execute(f"SELECT COUNT(*) FROM {name} WHERE id<?",
                              (row_id,)).fetchone()[0]
    return before + 2


def export_table(table: str) -> list:
    """[headers, *rows] as lists of strings, in sheet order."""
    cols = columns(table)
    out = [headers(table)]
    for r in read_table(table):
        out.append([r.get(c) or "" for c in cols])
    return out


# ── DB stats ─────────────────────────────────────────────────────────────────
def get_db_stats() -> dict:
    """Row counts for all tables — used in /api/health."""
    stats = {"db_path": DB_PATH, "db_size_kb": 0}
    try:
        stats["db_size_kb"] = round(os.path.getsize(DB_PATH) / 1024, 1)
    except FileNotFoundError:
        pass
    with get_db() as conn:
        for table in TABLES:
            stats[table.lower()] = conn.execute(
                f"SELECT COUNT(*) FROM {table.lower()}").fetchone()[0]
    return stats


def startup() -> dict:
    """Create tables and seed default settings. Called once from create_app()."""
    init_db()
    from .settings import init_settings
    seeded = init_settings()
    return {"db_path": DB_PATH, "settings_seeded": seeded, "stats": get_db_stats()}
