# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request-level board operations.

Each public method returns a :class:`~woldecks.errors.Result`; nothing
raised inside crosses this boundary.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from woldecks.auth import passwords
from woldecks.auth.engine import AuthorizationEngine, AuthOutcome, AuthRequest
from woldecks.errors import (
    AuthenticationError,
    NotFoundError,
    Result,
    ValidationError,
    run_guarded,
)
from woldecks.infra.post_repo import Post, PostRepository

logger = logging.getLogger(__name__)


def _text(payload: Dict[str, Any], key: str, *, strip: bool = True) -> str:
    v = payload.get(key)
    if not isinstance(v, str):
        return ""
    return v.strip() if strip else v


class BoardService:
    def __init__(
        self,
        engine: AuthorizationEngine,
        posts: PostRepository,
        *,
        admin_password_hash: str,
        pbkdf2_iterations: int = passwords.PBKDF2_ITERATIONS,
    ) -> None:
        self.engine = engine
        self.posts = posts
        self._admin_hash = admin_password_hash
        self._iterations = pbkdf2_iterations

    # ------------------ admin ------------------

    def login(self, payload: Dict[str, Any]) -> Result[str]:
        return run_guarded(self._login, payload)

    def _login(self, payload: Dict[str, Any]) -> str:
        password = _text(payload, "password", strip=False)
        if not password:
            raise ValidationError("Missing field: password")
        if not passwords.verify_admin_password(self._admin_hash, password):
            logger.warning("admin login rejected")
            raise AuthenticationError("Invalid password")
        logger.info("admin login accepted")
        return self.engine.issue_admin_session()

    def logout(self, admin_token: Optional[str]) -> Result[bool]:
        return run_guarded(self.engine.revoke_admin_session, admin_token)

    def is_admin(self, admin_token: Optional[str]) -> bool:
        return bool(admin_token) and self.engine.admin_session_valid(admin_token)

    # ------------------ posts ------------------

    def list_posts(self) -> Result[List[Dict[str, Any]]]:
        return run_guarded(lambda: [p.public(with_content=False) for p in self.posts.list_posts()])

    def create_post(self, payload: Dict[str, Any]) -> Result[str]:
        return run_guarded(self._create_post, payload)

    def _create_post(self, payload: Dict[str, Any]) -> str:
        title = _text(payload, "title")
        author = _text(payload, "author")
        content = _text(payload, "content")
        password = _text(payload, "password", strip=False)
        if not title or not author or not content or not password:
            raise ValidationError("Missing fields")
        record = passwords.make_record(password, iterations=self._iterations)
        post = self.posts.create(title=title, author=author, content=content, credential=record)
        logger.info("created post=%s", post.id)
        return post.id

    def get_post(self, post_id: str, admin_token: Optional[str]) -> Result[Dict[str, Any]]:
        return run_guarded(self._get_post, post_id, admin_token)

    def _get_post(self, post_id: str, admin_token: Optional[str]) -> Dict[str, Any]:
        if not self.is_admin(admin_token):
            raise AuthenticationError("Admin only")
        post = self.posts.get(post_id)
        if post is None:
            raise NotFoundError()
        return post.public()

    def view_post(
        self, post_id: str, payload: Dict[str, Any], admin_token: Optional[str]
    ) -> Result[Dict[str, Any]]:
        return run_guarded(self._view_post, post_id, payload, admin_token)

    def _view_post(
        self, post_id: str, payload: Dict[str, Any], admin_token: Optional[str]
    ) -> Dict[str, Any]:
        req = AuthRequest(
            post_id=post_id,
            is_admin=self.is_admin(admin_token),
            password=_text(payload, "password", strip=False) or None,
        )
        if not req.is_admin and not req.password:
            raise AuthenticationError("Password required")
        post = self.posts.get(post_id)
        if post is None:
            raise NotFoundError()
        outcome = self.engine.decide_view(req, post.credential)
        if not outcome.authorized:
            raise AuthenticationError("Invalid password")
        out: Dict[str, Any] = {"post": post.public()}
        if outcome.view_token:
            out["viewToken"] = outcome.view_token
        return out

    def _authorize_mutation(
        self, post_id: str, payload: Dict[str, Any], admin_token: Optional[str]
    ) -> Tuple[Post, AuthOutcome]:
        req = AuthRequest(
            post_id=post_id,
            is_admin=self.is_admin(admin_token),
            view_token=_text(payload, "viewToken", strip=False) or None,
            password=_text(payload, "password", strip=False) or None,
        )
        post = self.posts.get(post_id)
        if post is None and (req.is_admin or req.view_token):
            raise NotFoundError()
        outcome = self.engine.decide(req, post.credential if post else None)
        if not outcome.authorized or post is None:
            raise AuthenticationError("Unauthorized")
        return post, outcome

    @staticmethod
    def _mutation_body(outcome: AuthOutcome) -> Dict[str, Any]:
        out: Dict[str, Any] = {"ok": True}
        if outcome.view_token:
            out["viewToken"] = outcome.view_token
        return out

    def update_post(
        self, post_id: str, payload: Dict[str, Any], admin_token: Optional[str]
    ) -> Result[Dict[str, Any]]:
        return run_guarded(self._update_post, post_id, payload, admin_token)

    def _update_post(
        self, post_id: str, payload: Dict[str, Any], admin_token: Optional[str]
    ) -> Dict[str, Any]:
        title = _text(payload, "title")
        content = _text(payload, "content")
        if not title or not content:
            raise ValidationError("Missing fields")
        post, outcome = self._authorize_mutation(post_id, payload, admin_token)
        if self.posts.update(post.id, title=title, content=content) is None:
            raise NotFoundError()
        logger.info("updated post=%s (%s)", post.id, outcome.decision.value)
        return self._mutation_body(outcome)

    def delete_post(
        self, post_id: str, payload: Dict[str, Any], admin_token: Optional[str]
    ) -> Result[Dict[str, Any]]:
        return run_guarded(self._delete_post, post_id, payload, admin_token)

    def _delete_post(
        self, post_id: str, payload: Dict[str, Any], admin_token: Optional[str]
    ) -> Dict[str, Any]:
        post, outcome = self._authorize_mutation(post_id, payload, admin_token)
        if not self.posts.delete(post.id):
            raise NotFoundError()
        revoked = self.engine.revoke_post_tokens(post.id)
        logger.info("deleted post=%s (%s), revoked %d view tokens", post.id, outcome.decision.value, revoked)
        # The token minted for this request died with the post.
        return {"ok": True}
