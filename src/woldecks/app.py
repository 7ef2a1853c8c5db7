# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from woldecks.auth.engine import AuthorizationEngine
from woldecks.auth.session import COOKIE_NAME, cookie_settings, read_admin_cookie, sign_admin_cookie
from woldecks.auth.store import Clock, MemoryTokenStore, TokenStore
from woldecks.config import Settings, load_settings
from woldecks.errors import Result
from woldecks.infra.post_repo import PostRepository
from woldecks.services.board_service import BoardService

logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


def _json(body: Dict[str, Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=NO_STORE)


def _fail(result: Result) -> JSONResponse:
    return _json({"error": result.message}, status_code=result.status_code)


async def _read_json(request: Request) -> Optional[Dict[str, Any]]:
    """Parse the request body as a JSON object. Empty body -> {}; garbage -> None."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[TokenStore] = None,
    posts: Optional[PostRepository] = None,
    clock: Clock = time.time,
) -> FastAPI:
    """Build the app. Served by uvicorn as a factory (``woldecks.app:create_app``)."""
    settings = settings or load_settings()
    store = store if store is not None else MemoryTokenStore(clock=clock)
    posts = posts if posts is not None else PostRepository(settings.posts_path)
    engine = AuthorizationEngine(
        store,
        settings.token_pepper,
        admin_ttl=settings.admin_ttl,
        view_ttl=settings.view_ttl,
        pbkdf2_iterations=settings.pbkdf2_iterations,
        clock=clock,
    )
    board = BoardService(
        engine,
        posts,
        admin_password_hash=settings.admin_password_hash,
        pbkdf2_iterations=settings.pbkdf2_iterations,
    )
    if not settings.admin_password_hash:
        logger.warning("no admin password configured, admin login is disabled")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        swept = store.delete_expired()
        logger.info("token store ready (%d stale entries swept)", swept)
        yield
        store.clear()
        logger.info("token store cleared")

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.board = board

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return _json({"error": "Internal error"}, status_code=500)

    def admin_token(request: Request) -> Optional[str]:
        return read_admin_cookie(
            request.cookies.get(COOKIE_NAME),
            settings.secret_key,
            max_age=settings.admin_ttl,
        )

    # ------------------ Admin ------------------

    @app.get("/api/admin/me")
    def admin_me(request: Request):
        return _json({"admin": board.is_admin(admin_token(request))})

    @app.post("/api/admin/login")
    @app.post("/login")
    async def admin_login(request: Request):
        payload = await _read_json(request)
        if payload is None:
            return _json({"error": "Invalid JSON"}, status_code=400)
        result = await run_in_threadpool(board.login, payload)
        if not result.ok:
            return _fail(result)
        resp = _json({"admin": True})
        resp.set_cookie(
            COOKIE_NAME,
            sign_admin_cookie(result.value, settings.secret_key),
            max_age=settings.admin_ttl,
            **cookie_settings(settings.cookie_secure),
        )
        return resp

    @app.post("/api/admin/logout")
    @app.post("/logout")
    def admin_logout(request: Request):
        result = board.logout(admin_token(request))
        if not result.ok:
            return _fail(result)
        resp = _json({"ok": True})
        resp.delete_cookie(COOKIE_NAME, **cookie_settings(settings.cookie_secure))
        return resp

    # ------------------ Posts ------------------

    @app.get("/api/posts")
    def list_posts():
        result = board.list_posts()
        if not result.ok:
            return _fail(result)
        return _json({"posts": result.value})

    @app.post("/api/posts")
    async def create_post(request: Request):
        payload = await _read_json(request)
        if payload is None:
            return _json({"error": "Invalid JSON"}, status_code=400)
        result = await run_in_threadpool(board.create_post, payload)
        if not result.ok:
            return _fail(result)
        return _json({"id": result.value}, status_code=201)

    @app.get("/api/posts/{post_id}")
    def get_post(post_id: str, request: Request):
        result = board.get_post(post_id, admin_token(request))
        if not result.ok:
            return _fail(result)
        return _json({"post": result.value})

    @app.post("/api/posts/{post_id}/view")
    async def view_post(post_id: str, request: Request):
        payload = await _read_json(request)
        if payload is None:
            return _json({"error": "Invalid JSON"}, status_code=400)
        result = await run_in_threadpool(board.view_post, post_id, payload, admin_token(request))
        if not result.ok:
            return _fail(result)
        return _json(result.value)

    @app.put("/api/posts/{post_id}")
    async def update_post(post_id: str, request: Request):
        payload = await _read_json(request)
        if payload is None:
            return _json({"error": "Invalid JSON"}, status_code=400)
        result = await run_in_threadpool(board.update_post, post_id, payload, admin_token(request))
        if not result.ok:
            return _fail(result)
        return _json(result.value)

    @app.delete("/api/posts/{post_id}")
    async def delete_post(post_id: str, request: Request):
        payload = await _read_json(request)
        if payload is None:
            return _json({"error": "Invalid JSON"}, status_code=400)
        result = await run_in_threadpool(board.delete_post, post_id, payload, admin_token(request))
        if not result.ok:
            return _fail(result)
        return _json(result.value)

    return app
