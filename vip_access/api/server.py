from __future__ import annotations

import sqlite3
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional, Union

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from vip_access import __version__
from vip_access.accounts import AccountStore, check_result, normalize_login
from vip_access.api.deps import (
    ADMIN_PATH_PREFIX,
    ADMIN_SECRET_HEADER,
    admin_secret_matches,
    get_store,
    require_admin_secret,
)
from vip_access.config import Config, load_config
from vip_access.tiers import DEFAULT_TIER, is_valid, normalize, resolve_tier
from vip_access.util.time import utcnow_iso


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


class AddAccountRequest(BaseModel):
    login: Optional[Union[str, int]] = None
    tier: Optional[str] = None
    note: Optional[Union[str, int]] = None


class RemoveAccountRequest(BaseModel):
    login: Optional[Union[str, int]] = None


def _error_body(detail: Any) -> Dict[str, Any]:
    # Dict details carry extra fields (e.g. allowed=false on the check endpoint).
    if isinstance(detail, dict):
        return {"ok": False, **detail}
    return {"ok": False, "error": str(detail)}


def create_app(cfg: Optional[Config] = None) -> FastAPI:
    """Build the API.

    Config is validated here so a bad deployment fails before it can listen.
    Storage is opened (and migrated) in the lifespan, before the first request.
    """
    cfg = (cfg or load_config()).validate()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        store = AccountStore(cfg.DB_PATH).open()
        app.state.store = store
        _debug(f"VIP API ready (db={cfg.DB_PATH})")
        try:
            yield
        finally:
            store.close()
            _debug("VIP API stopped")

    app = FastAPI(title="VIP Access API", version=__version__, lifespan=lifespan)
    app.state.cfg = cfg

    origins = cfg.cors_origins()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # -----------------------------
    # Error mapping
    # -----------------------------

    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Bodies are parsed before the admin gate runs; unauthenticated callers
        # still get 401, not a hint about the payload.
        if request.url.path.startswith(ADMIN_PATH_PREFIX) and not admin_secret_matches(
            cfg, request.headers.get(ADMIN_SECRET_HEADER)
        ):
            return JSONResponse(status_code=401, content=_error_body("unauthorized"))
        return JSONResponse(status_code=400, content=_error_body("invalid_request"))

    # -----------------------------
    # Health
    # -----------------------------

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "VIP API is running"

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok", "version": __version__, "time": utcnow_iso()}

    # -----------------------------
    # Public check
    # -----------------------------

    @app.get("/api/check/{login}")
    def check(
        login: str,
        tier: Optional[str] = Query(None, description="Required tier (default AFFILIATE)"),
        store: AccountStore = Depends(get_store),
    ) -> Dict[str, Any]:
        """/api/check/123456?tier=VIP -> allowed if userRank >= requiredRank."""
        login = normalize_login(login)
        required_tier = resolve_tier(tier)

        if not login:
            raise HTTPException(status_code=400, detail={"allowed": False, "error": "missing_login"})
        if not is_valid(required_tier):
            raise HTTPException(
                status_code=400, detail={"allowed": False, "error": "invalid_required_tier"}
            )

        account = store.get_by_login(login)
        return check_result(account, login, required_tier)

    # -----------------------------
    # Admin
    # -----------------------------

    @app.get("/api/admin/list", dependencies=[Depends(require_admin_secret)])
    def admin_list(
        tier: Optional[str] = Query(None),
        store: AccountStore = Depends(get_store),
    ) -> Dict[str, Any]:
        tier_q = normalize(tier)
        accounts = store.list_by_tier(tier_q) if tier_q else store.list_all()
        return {"ok": True, "rows": [a.to_dict() for a in accounts]}

    @app.post("/api/admin/add", dependencies=[Depends(require_admin_secret)])
    def admin_add(
        payload: Optional[AddAccountRequest] = None,
        store: AccountStore = Depends(get_store),
    ) -> Dict[str, Any]:
        payload = payload or AddAccountRequest()
        login = normalize_login(payload.login)
        tier = resolve_tier(payload.tier, DEFAULT_TIER)
        note = str(payload.note or "").strip()

        if not login:
            raise HTTPException(status_code=400, detail="missing_login")
        if not is_valid(tier):
            raise HTTPException(status_code=400, detail="invalid_tier")

        try:
            store.upsert(login, tier, note)
        except sqlite3.Error as e:
            _debug(f"add failed for login={login}: {e}")
            raise HTTPException(status_code=500, detail="db_error")

        return {"ok": True, "added": login, "tier": tier}

    @app.post("/api/admin/remove", dependencies=[Depends(require_admin_secret)])
    def admin_remove(
        payload: Optional[RemoveAccountRequest] = None,
        store: AccountStore = Depends(get_store),
    ) -> Dict[str, Any]:
        payload = payload or RemoveAccountRequest()
        login = normalize_login(payload.login)
        if not login:
            raise HTTPException(status_code=400, detail="missing_login")

        store.remove(login)
        return {"ok": True, "removed": login}

    # -----------------------------
    # Admin UI (static bundle, optional)
    # -----------------------------
    static_dir = Path(cfg.ADMIN_STATIC_DIR)
    if static_dir.is_dir():
        app.mount("/admin", StaticFiles(directory=str(static_dir), html=True), name="admin")
    else:
        _debug(f"Admin UI directory not found, /admin disabled: {static_dir}")

    return app
