# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authorization decisions for post mutations.

Precedence, first match wins:

1. a valid admin session
2. a view token scoped to the target post
3. the post password (mints a fresh view token)
4. reject

The engine does not know about HTTP or the post store; callers resolve the
admin cookie and load the post credential, then ask :meth:`decide`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from woldecks.auth import passwords, tokens
from woldecks.auth.passwords import StoredCredential
from woldecks.auth.store import KIND_ADMIN, KIND_VIEW, Clock, TokenRecord, TokenStore

logger = logging.getLogger(__name__)

ADMIN_TTL_SECONDS = 24 * 60 * 60
VIEW_TTL_SECONDS = 60 * 60


class Decision(str, Enum):
    ADMIN = "admin"
    VIEW_TOKEN = "view_token"
    PASSWORD = "password"
    NO_CREDENTIAL = "no_credential"
    INVALID_CREDENTIAL = "invalid_credential"


@dataclass(frozen=True)
class AuthRequest:
    post_id: str
    is_admin: bool = False
    view_token: Optional[str] = None
    password: Optional[str] = None


@dataclass(frozen=True)
class AuthOutcome:
    decision: Decision
    view_token: Optional[str] = None

    @property
    def authorized(self) -> bool:
        return self.decision in (Decision.ADMIN, Decision.VIEW_TOKEN, Decision.PASSWORD)


class AuthorizationEngine:
    def __init__(
        self,
        store: TokenStore,
        pepper: str,
        *,
        admin_ttl: int = ADMIN_TTL_SECONDS,
        view_ttl: int = VIEW_TTL_SECONDS,
        pbkdf2_iterations: int = passwords.PBKDF2_ITERATIONS,
        clock: Clock = time.time,
    ) -> None:
        if not pepper:
            raise ValueError("Token pepper is not configured")
        self._store = store
        self._pepper = pepper
        self._admin_ttl = int(admin_ttl)
        self._view_ttl = int(view_ttl)
        self._iterations = int(pbkdf2_iterations)
        self._clock = clock

    # ---- token minting / lookup ----

    def _mint(self, kind: str, ttl: int, post_id: Optional[str] = None) -> str:
        issued = tokens.issue(self._pepper)
        now = self._clock()
        self._store.put(
            issued.hash,
            TokenRecord(
                kind=kind,
                token_hash=issued.hash,
                token_salt=issued.salt,
                created_at=now,
                expires_at=now + ttl,
                post_id=post_id,
            ),
        )
        return issued.presented

    def _find(self, presented: Optional[str], kind: str) -> Optional[TokenRecord]:
        hashed = tokens.hash_presented(presented, self._pepper)
        if hashed is None:
            return None
        token_hash, _ = hashed
        rec = self._store.lookup_by_hash(token_hash, lambda r: r.kind == kind)
        if rec is None:
            return None
        if not tokens.verify(presented, rec.token_hash, rec.token_salt, self._pepper):
            return None
        return rec

    def issue_admin_session(self) -> str:
        return self._mint(KIND_ADMIN, self._admin_ttl)

    def admin_session_valid(self, presented: Optional[str]) -> bool:
        return self._find(presented, KIND_ADMIN) is not None

    def revoke_admin_session(self, presented: Optional[str]) -> bool:
        rec = self._find(presented, KIND_ADMIN)
        if rec is None:
            return False
        return self._store.delete(rec.token_hash)

    def issue_view_token(self, post_id: str) -> str:
        return self._mint(KIND_VIEW, self._view_ttl, post_id=post_id)

    def view_token_valid(self, presented: Optional[str], post_id: str) -> bool:
        rec = self._find(presented, KIND_VIEW)
        return rec is not None and rec.post_id == post_id

    def revoke_post_tokens(self, post_id: str) -> int:
        return self._store.delete_where(lambda r: r.kind == KIND_VIEW and r.post_id == post_id)

    # ---- policy ----

    def _check_password(self, req: AuthRequest, credential: Optional[StoredCredential]) -> bool:
        if credential is None:
            return passwords.dummy_verify(req.password or "", iterations=self._iterations)
        return passwords.verify(req.password or "", credential)

    def decide(self, req: AuthRequest, credential: Optional[StoredCredential]) -> AuthOutcome:
        """Run the edit/delete precedence for one request.

        ``credential`` is the stored record of the target post, or None if
        the post does not exist. A successful password check mints a view
        token and returns it on the outcome.
        """
        if req.is_admin:
            logger.info("authorized post=%s via admin session", req.post_id)
            return AuthOutcome(Decision.ADMIN)

        if req.view_token and self.view_token_valid(req.view_token, req.post_id):
            logger.info("authorized post=%s via view token", req.post_id)
            return AuthOutcome(Decision.VIEW_TOKEN)

        if req.password:
            return self.decide_view(req, credential)

        if req.view_token:
            logger.warning("rejected post=%s: invalid view token", req.post_id)
            return AuthOutcome(Decision.INVALID_CREDENTIAL)
        logger.warning("rejected post=%s: no credential", req.post_id)
        return AuthOutcome(Decision.NO_CREDENTIAL)

    def decide_view(self, req: AuthRequest, credential: Optional[StoredCredential]) -> AuthOutcome:
        """Password exchange for the view endpoint: admin short-circuit, else password only."""
        if req.is_admin:
            return AuthOutcome(Decision.ADMIN)
        if not req.password:
            logger.warning("rejected post=%s: no credential", req.post_id)
            return AuthOutcome(Decision.NO_CREDENTIAL)
        if not self._check_password(req, credential):
            logger.warning("rejected post=%s: invalid password", req.post_id)
            return AuthOutcome(Decision.INVALID_CREDENTIAL)
        logger.info("authorized post=%s via password, issuing view token", req.post_id)
        return AuthOutcome(Decision.PASSWORD, view_token=self.issue_view_token(req.post_id))
