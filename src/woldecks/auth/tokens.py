# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Peppered bearer tokens.

A token is handed out once as ``secret.salt``. Only
``sha256(secret:salt:pepper)`` and the salt are ever stored, so a leaked
store cannot be replayed without the server pepper.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from typing import Optional, Tuple

from woldecks.auth.constant_time import safe_equal

SEPARATOR = "."
SECRET_BYTES = 32
SALT_BYTES = 16


@dataclass(frozen=True)
class IssuedToken:
    secret: str
    salt: str
    hash: str

    @property
    def presented(self) -> str:
        return f"{self.secret}{SEPARATOR}{self.salt}"

    def __repr__(self) -> str:
        return f"IssuedToken(hash={self.hash[:12]}...)"


def token_hash(secret: str, salt: str, pepper: str) -> str:
    return hashlib.sha256(f"{secret}:{salt}:{pepper}".encode("utf-8")).hexdigest()


def issue(pepper: str) -> IssuedToken:
    if not pepper:
        raise ValueError("Token pepper is not configured")
    # token_urlsafe never emits the separator, so parse() can split on it.
    secret = secrets.token_urlsafe(SECRET_BYTES)
    salt = secrets.token_hex(SALT_BYTES)
    return IssuedToken(secret=secret, salt=salt, hash=token_hash(secret, salt, pepper))


def parse(presented: object) -> Optional[Tuple[str, str]]:
    if not isinstance(presented, str) or not presented:
        return None
    secret, sep, salt = presented.rpartition(SEPARATOR)
    if not sep or not secret or not salt:
        return None
    return secret, salt


def hash_presented(presented: object, pepper: str) -> Optional[Tuple[str, str]]:
    """Return ``(hash, salt)`` for a client-supplied token, or None if malformed."""
    parts = parse(presented)
    if parts is None:
        return None
    secret, salt = parts
    return token_hash(secret, salt, pepper), salt


def verify(presented: object, stored_hash: str, stored_salt: str, pepper: str) -> bool:
    parts = parse(presented)
    if parts is None or not stored_hash or not stored_salt:
        return False
    secret, salt = parts
    hash_ok = safe_equal(token_hash(secret, salt, pepper), stored_hash)
    salt_ok = safe_equal(salt, stored_salt)
    return hash_ok and salt_ok
