"""Database schema for the VIP access service.

The table started life as a plain membership list (login + note). The `tier`
column was added later; older databases are upgraded in place at startup by the
migration steps in `vip_access.db`.

Timestamps use SQLite's datetime('now') TEXT format (UTC, `YYYY-MM-DD HH:MM:SS`),
which sorts lexicographically in time order.
"""

from __future__ import annotations

from vip_access.tiers import DEFAULT_TIER


ACCOUNTS_TABLE = "vip_accounts"
TIER_INDEX = "idx_vip_accounts_tier"

# Base shape shared by every deployment. `tier` is added by migration so that
# old and new databases go through exactly the same path.
CREATE_ACCOUNTS_TABLE = f"""
CREATE TABLE IF NOT EXISTS {ACCOUNTS_TABLE} (
    login TEXT PRIMARY KEY,
    note  TEXT,
    created_at TEXT DEFAULT (datetime('now'))
)
"""

ADD_TIER_COLUMN = (
    f"ALTER TABLE {ACCOUNTS_TABLE} ADD COLUMN tier TEXT NOT NULL DEFAULT '{DEFAULT_TIER}'"
)

BACKFILL_BLANK_TIERS = f"""
UPDATE {ACCOUNTS_TABLE}
SET tier = ?
WHERE tier IS NULL OR TRIM(tier) = ''
"""

# Must run after the tier column exists.
CREATE_TIER_INDEX = f"CREATE INDEX IF NOT EXISTS {TIER_INDEX} ON {ACCOUNTS_TABLE} (tier)"
