from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from vip_access import schema
from vip_access.db import connect, init_db
from vip_access.tiers import DEFAULT_TIER, VALID_TIERS, allowed, normalize, rank_of


def _debug(msg: str) -> None:
    print(f"[accounts] {msg}")


class StoreClosedError(RuntimeError):
    """Raised when an AccountStore is used outside its open/close lifecycle."""


@dataclass(frozen=True)
class Account:
    login: str
    tier: str
    note: str
    created_at: Optional[str]

    @classmethod
    def from_row(cls, row: Any) -> "Account":
        d = dict(row)
        return cls(
            login=str(d["login"]),
            tier=str(d.get("tier") or ""),
            note=str(d.get("note") or ""),
            created_at=d.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def normalize_login(login: Any) -> str:
    return str(login or "").strip()


_SELECT = f"SELECT login, tier, note, created_at FROM {schema.ACCOUNTS_TABLE}"
# rowid breaks ties inside the same second; a replaced row gets a new rowid.
_ORDER = "ORDER BY created_at DESC, rowid DESC"


class AccountStore:
    """Owns the accounts table for the lifetime of the process.

    `open()` runs the startup migrations; every operation after that opens a
    short-lived connection. `close()` ends the lifecycle and further calls raise.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._open = False

    def open(self) -> "AccountStore":
        init_db(self.db_path)
        self._open = True

        unknown = self.unknown_tier_logins()
        if unknown:
            # Lenient: these rank below every tier until an admin re-adds them.
            _debug(
                f"WARNING: {len(unknown)} account(s) have an unknown tier and will fail every check: "
                + ", ".join(unknown[:10])
            )
        return self

    def close(self) -> None:
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def __enter__(self) -> "AccountStore":
        return self.open()

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _connect(self):
        if not self._open:
            raise StoreClosedError("account store is not open")
        return connect(self.db_path)

    # -----------------------------
    # Reads
    # -----------------------------

    def get_by_login(self, login: str) -> Optional[Account]:
        with self._connect() as conn:
            row = conn.execute(f"{_SELECT} WHERE login = ?", (login,)).fetchone()
        return Account.from_row(row) if row is not None else None

    def list_all(self) -> List[Account]:
        with self._connect() as conn:
            rows = conn.execute(f"{_SELECT} {_ORDER}").fetchall()
        return [Account.from_row(r) for r in rows]

    def list_by_tier(self, tier: str) -> List[Account]:
        with self._connect() as conn:
            rows = conn.execute(
                f"{_SELECT} WHERE UPPER(tier) = ? {_ORDER}",
                (normalize(tier),),
            ).fetchall()
        return [Account.from_row(r) for r in rows]

    def count(self) -> int:
        with self._connect() as conn:
            row = conn.execute(f"SELECT COUNT(*) AS n FROM {schema.ACCOUNTS_TABLE}").fetchone()
        return int(row["n"])

    def unknown_tier_logins(self) -> List[str]:
        placeholders = ",".join("?" for _ in VALID_TIERS)
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT login FROM {schema.ACCOUNTS_TABLE} "
                f"WHERE UPPER(TRIM(tier)) NOT IN ({placeholders}) ORDER BY login",
                VALID_TIERS,
            ).fetchall()
        return [str(r["login"]) for r in rows]

    # -----------------------------
    # Writes
    # -----------------------------

    def upsert(self, login: str, tier: str = DEFAULT_TIER, note: str = "") -> None:
        """Insert or fully replace an account.

        Replacing resets created_at: a re-add counts as a new registration.
        """
        with self._connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO {schema.ACCOUNTS_TABLE} (login, tier, note) VALUES (?, ?, ?)",
                (login, tier, note),
            )

    def remove(self, login: str) -> bool:
        """Delete an account. Returns whether a row existed."""
        with self._connect() as conn:
            cur = conn.execute(f"DELETE FROM {schema.ACCOUNTS_TABLE} WHERE login = ?", (login,))
            return int(cur.rowcount or 0) > 0


def check_result(account: Optional[Account], login: str, required_tier: str) -> Dict[str, Any]:
    """Response body for a tier check. `required_tier` must already be valid."""
    if account is None:
        return {
            "allowed": False,
            "reason": "NOT_FOUND",
            "login": login,
            "requiredTier": required_tier,
        }

    user_tier = normalize(account.tier)
    return {
        "ok": True,
        "allowed": allowed(user_tier, required_tier),
        "login": login,
        "userTier": user_tier,
        "requiredTier": required_tier,
        "userRank": rank_of(user_tier),
        "requiredRank": rank_of(required_tier),
    }
