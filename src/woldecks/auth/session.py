# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from itsdangerous import BadPayload, BadSignature, BadTimeSignature, URLSafeTimedSerializer

COOKIE_NAME = "woldecks.admin"
SESSION_SALT = "woldecks.admin.v1"


def _serializer(secret_key: str) -> URLSafeTimedSerializer:
    if not secret_key:
        raise RuntimeError("Missing WOLDECKS_SECRET_KEY")
    return URLSafeTimedSerializer(secret_key=secret_key, salt=SESSION_SALT)


def sign_admin_cookie(token: str, secret_key: str) -> str:
    return _serializer(secret_key).dumps({"t": token})


def read_admin_cookie(value: Optional[str], secret_key: str, *, max_age: int) -> Optional[str]:
    """Return the bearer token wrapped in a signed admin cookie, or None.

    The signature only proves the cookie was minted here and is not older
    than ``max_age``; the token inside still has to match the token store.
    """
    if not value:
        return None
    try:
        data = _serializer(secret_key).loads(value, max_age=max_age)
    except (BadSignature, BadTimeSignature, BadPayload):
        return None
    token = (data or {}).get("t") if isinstance(data, dict) else None
    if not isinstance(token, str) or not token:
        return None
    return token


def cookie_settings(secure: bool) -> dict:
    return {"httponly": True, "samesite": "lax", "secure": secure, "path": "/"}
