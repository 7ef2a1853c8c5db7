# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import hmac
from typing import Union

BytesLike = Union[bytes, bytearray, str]


def _as_bytes(value: BytesLike) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def safe_equal(a: BytesLike, b: BytesLike) -> bool:
    """Compare two secrets without short-circuiting on the first difference.

    Every hash/token comparison in the auth package goes through here.
    Strings are compared on their UTF-8 bytes so a non-ASCII value never
    raises (``hmac.compare_digest`` rejects non-ASCII ``str``).
    """
    if a is None or b is None:
        return False
    return hmac.compare_digest(_as_bytes(a), _as_bytes(b))
