"""Manage the accounts table directly (no HTTP, no admin secret).

Usage:
  python scripts/manage_accounts.py add 123456 --tier VIP --note "paid 2024-05"
  python scripts/manage_accounts.py list --tier ELITE
  python scripts/manage_accounts.py check 123456 --tier MASTER
  python scripts/manage_accounts.py remove 123456

Uses the same DB path as the API (VIP_DB_PATH / DB_PATH) unless --db is given.
NOTE: Intended for operators with shell access to the service host.
"""

from __future__ import annotations

import argparse
import json
from typing import List, Optional

from vip_access.accounts import AccountStore, check_result, normalize_login
from vip_access.config import load_config
from vip_access.tiers import VALID_TIERS, is_valid, normalize, resolve_tier


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="vip-access", description="Manage VIP accounts")
    ap.add_argument("--db", default=None, help="SQLite path (default: from environment)")
    sub = ap.add_subparsers(dest="command", required=True)

    p_add = sub.add_parser("add", help="Add or replace an account")
    p_add.add_argument("login")
    p_add.add_argument("--tier", default=None, help=f"One of {', '.join(VALID_TIERS)}")
    p_add.add_argument("--note", default="")

    p_rm = sub.add_parser("remove", help="Remove an account")
    p_rm.add_argument("login")

    p_list = sub.add_parser("list", help="List accounts (newest first)")
    p_list.add_argument("--tier", default=None)

    p_check = sub.add_parser("check", help="Check a login against a required tier")
    p_check.add_argument("login")
    p_check.add_argument("--tier", default=None)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)

    db_path = args.db or load_config().DB_PATH

    with AccountStore(db_path) as store:
        if args.command == "list":
            tier_q = normalize(args.tier)
            accounts = store.list_by_tier(tier_q) if tier_q else store.list_all()
            for a in accounts:
                print(json.dumps(a.to_dict()))
            return 0

        login = normalize_login(args.login)
        if not login:
            ap.error("login must not be blank")

        if args.command == "remove":
            existed = store.remove(login)
            print(f"Removed: {login}" if existed else f"Not found (nothing removed): {login}")
            return 0

        tier = resolve_tier(args.tier)
        if not is_valid(tier):
            ap.error(f"invalid tier {args.tier!r}; expected one of {', '.join(VALID_TIERS)}")

        if args.command == "add":
            store.upsert(login, tier, (args.note or "").strip())
            print(f"Added: {login} tier={tier}")
            return 0

        # check
        result = check_result(store.get_by_login(login), login, tier)
        print(json.dumps(result))
        return 0 if result["allowed"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
