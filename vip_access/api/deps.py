from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Header, HTTPException, Request

from vip_access.accounts import AccountStore
from vip_access.config import Config


ADMIN_SECRET_HEADER = "x-admin-secret"
ADMIN_PATH_PREFIX = "/api/admin/"


def get_config(request: Request) -> Config:
    cfg = getattr(request.app.state, "cfg", None)
    if cfg is None:
        raise HTTPException(status_code=500, detail="server_config_missing")
    return cfg


def get_store(request: Request) -> AccountStore:
    store = getattr(request.app.state, "store", None)
    if store is None or not store.is_open:
        raise HTTPException(status_code=503, detail="storage_unavailable")
    return store


def admin_secret_matches(cfg: Config, supplied: Optional[str]) -> bool:
    expected = cfg.ADMIN_SECRET or ""
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def require_admin_secret(
    request: Request,
    x_admin_secret: Optional[str] = Header(default=None, alias=ADMIN_SECRET_HEADER),
) -> None:
    """Gate for /api/admin/*: the header must equal the configured secret exactly."""
    if not admin_secret_matches(get_config(request), x_admin_secret):
        raise HTTPException(status_code=401, detail="unauthorized")
