# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Password hashing.

Two independent schemes live here:

- Per-post credentials: salted PBKDF2 records stored next to each post.
  The record keeps its own parameters so old posts stay verifiable if the
  defaults change.
- The admin password: a single argon2 hash loaded from configuration.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Union

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from woldecks.auth.constant_time import safe_equal

PBKDF2_ITERATIONS = 120_000
MIN_ITERATIONS = 100_000
MAX_ITERATIONS = 10_000_000
KEY_LENGTH = 32
SALT_BYTES = 16
DIGEST = "sha256"

# Digest names as they may appear in stored records -> hashlib name.
_DIGESTS = {
    "sha256": "sha256",
    "sha-256": "sha256",
    "sha384": "sha384",
    "sha-384": "sha384",
    "sha512": "sha512",
    "sha-512": "sha512",
}

_PH = PasswordHasher()


@dataclass(frozen=True)
class CredentialRecord:
    salt_hex: str
    iterations: int
    digest: str
    keylen: int
    hash_hex: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CredentialRecord":
        return cls(
            salt_hex=str(raw["salt_hex"]),
            iterations=int(raw["iterations"]),
            digest=str(raw["digest"]),
            keylen=int(raw["keylen"]),
            hash_hex=str(raw["hash_hex"]),
        )


# Posts whose stored record cannot be parsed keep the raw mapping; verify() fails closed on it.
StoredCredential = Union[CredentialRecord, Mapping[str, Any]]


def derive(password: str, salt: bytes, iterations: int, keylen: int, digest: str) -> bytes:
    name = _DIGESTS.get(str(digest or "").strip().lower())
    if not name:
        raise ValueError(f"Unsupported digest: {digest!r}")
    if not (0 < iterations <= MAX_ITERATIONS):
        raise ValueError("Iteration count out of range")
    if keylen <= 0:
        raise ValueError("Key length must be positive")
    return hashlib.pbkdf2_hmac(name, password.encode("utf-8"), salt, iterations, dklen=keylen)


def make_record(password: str, *, iterations: int = PBKDF2_ITERATIONS) -> CredentialRecord:
    if not password:
        raise ValueError("Empty password")
    if iterations < MIN_ITERATIONS:
        raise ValueError(f"At least {MIN_ITERATIONS} iterations are required")
    salt = os.urandom(SALT_BYTES)
    hashed = derive(password, salt, iterations, KEY_LENGTH, DIGEST)
    return CredentialRecord(
        salt_hex=salt.hex(),
        iterations=iterations,
        digest=DIGEST,
        keylen=KEY_LENGTH,
        hash_hex=hashed.hex(),
    )


def verify(password: str, record: Optional[StoredCredential]) -> bool:
    """Check ``password`` against a stored record. Malformed records fail closed."""
    if not password or record is None:
        return False
    try:
        if not isinstance(record, CredentialRecord):
            record = CredentialRecord.from_dict(record)
        salt = bytes.fromhex(record.salt_hex)
        expected = bytes.fromhex(record.hash_hex)
        actual = derive(password, salt, record.iterations, record.keylen, record.digest)
    except (KeyError, TypeError, ValueError):
        return False
    return safe_equal(actual, expected)


# Used when the target post does not exist, so the miss costs a full derivation too.
_DUMMY: Dict[int, CredentialRecord] = {}


def dummy_verify(password: str, *, iterations: int = PBKDF2_ITERATIONS) -> bool:
    record = _DUMMY.get(iterations)
    if record is None:
        record = _DUMMY.setdefault(iterations, make_record(os.urandom(16).hex(), iterations=iterations))
    verify(password or "x", record)
    return False


def hash_admin_password(plain: str) -> str:
    if not plain:
        raise ValueError("Empty password")
    return _PH.hash(plain)


def verify_admin_password(hash_value: str, plain: str) -> bool:
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False
