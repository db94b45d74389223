import sqlite3
from pathlib import Path

ADMIN_SECRET = "test-secret-123"
ADMIN_HEADERS = {"x-admin-secret": ADMIN_SECRET}


def make_legacy_db(path: str, rows) -> None:
    """Create the pre-tier table shape: (login, note, created_at)."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.execute(
            """
            CREATE TABLE vip_accounts (
                login TEXT PRIMARY KEY,
                note  TEXT,
                created_at TEXT DEFAULT (datetime('now'))
            )
            """
        )
        conn.executemany("INSERT INTO vip_accounts (login, note) VALUES (?, ?)", rows)
        conn.commit()
    finally:
        conn.close()


def raw_execute(path: str, sql: str, params=()) -> list:
    """Run one statement against the file outside the store and return all rows."""
    conn = sqlite3.connect(path)
    try:
        rows = conn.execute(sql, params).fetchall()
        conn.commit()
        return rows
    finally:
        conn.close()


def table_columns(path: str, table: str = "vip_accounts") -> list:
    return [r[1] for r in raw_execute(path, f"PRAGMA table_info({table})")]
