from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, List, Tuple

from vip_access import schema
from vip_access.tiers import DEFAULT_TIER


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def resolve_db_path(db_path: str) -> str:
    """Accept a plain file path or the `sqlite:///path` form."""
    p = (db_path or "").strip()
    if p.lower().startswith("sqlite:///"):
        p = p[len("sqlite:///") :]
    return p


@contextmanager
def connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """Open the SQLite database with sensible defaults.

    Commits when the block exits cleanly, rolls back (and re-raises) otherwise.
    """
    path = resolve_db_path(db_path)
    if not path:
        raise ValueError("db_path_blank")

    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path, timeout=30, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    # Concurrency pragmas (API workers + the admin CLI may share the file)
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA busy_timeout=5000;")  # 5s
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _has_column(conn: Any, table: str, col: str) -> bool:
    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return any(str(r["name"]).lower() == col.lower() for r in rows)


# -----------------------------
# Migration steps
# -----------------------------
# Each step is idempotent: it checks its own postcondition and returns True only
# when it actually changed the database.


def _create_accounts_table(conn: Any) -> bool:
    existed = _has_column(conn, schema.ACCOUNTS_TABLE, "login")
    conn.execute(schema.CREATE_ACCOUNTS_TABLE)
    return not existed


def _add_tier_column(conn: Any) -> bool:
    if _has_column(conn, schema.ACCOUNTS_TABLE, "tier"):
        return False
    _debug("Migrating DB: adding tier column...")
    conn.execute(schema.ADD_TIER_COLUMN)
    return True


def _backfill_blank_tiers(conn: Any) -> bool:
    cur = conn.execute(schema.BACKFILL_BLANK_TIERS, (DEFAULT_TIER,))
    n = int(cur.rowcount or 0)
    if n > 0:
        _debug(f"Backfilled {n} account(s) with blank tier -> {DEFAULT_TIER}")
    return n > 0


def _create_tier_index(conn: Any) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type='index' AND name=?",
        (schema.TIER_INDEX,),
    ).fetchone()
    if row is not None:
        return False
    conn.execute(schema.CREATE_TIER_INDEX)
    return True


MIGRATIONS: List[Tuple[str, Callable[[Any], bool]]] = [
    ("create_accounts_table", _create_accounts_table),
    ("add_tier_column", _add_tier_column),
    ("backfill_blank_tiers", _backfill_blank_tiers),
    ("create_tier_index", _create_tier_index),
]


def migrate(conn: Any) -> List[str]:
    """Run every migration step in order. Returns the names of steps that did work."""
    applied: List[str] = []
    for name, step in MIGRATIONS:
        if step(conn):
            applied.append(name)
    return applied


def init_db(db_path: str) -> List[str]:
    """Create the accounts table and bring older databases up to date.

    All steps run inside one exclusive transaction so a second process starting
    at the same time waits instead of migrating concurrently. Any failure rolls
    back and propagates; callers must not serve requests afterwards.
    """
    _debug(f"Initializing DB at {resolve_db_path(db_path)}")
    with connect(db_path) as conn:
        conn.execute("BEGIN EXCLUSIVE")
        applied = migrate(conn)
    _debug("DB ready (tier enabled).")
    return applied
