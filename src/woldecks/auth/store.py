# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

KIND_ADMIN = "admin"
KIND_VIEW = "view"
SWEEP_INTERVAL_SECONDS = 300

Clock = Callable[[], float]


@dataclass(frozen=True)
class TokenRecord:
    """Server-side half of a bearer token. The secret itself is never kept."""

    kind: str
    token_hash: str
    token_salt: str
    created_at: float
    expires_at: float
    post_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.kind == KIND_ADMIN

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


RecordPredicate = Callable[[TokenRecord], bool]


class TokenStore(ABC):
    """Token/session persistence used by the authorization engine.

    Expiry is enforced on every read: a record past ``expires_at`` is
    reported as absent even if it has not been swept yet.
    """

    @abstractmethod
    def put(self, key: str, record: TokenRecord) -> None: ...

    @abstractmethod
    def get(self, key: str) -> Optional[TokenRecord]: ...

    @abstractmethod
    def delete(self, key: str) -> bool: ...

    @abstractmethod
    def delete_where(self, predicate: RecordPredicate) -> int: ...

    @abstractmethod
    def delete_expired(self) -> int: ...

    @abstractmethod
    def clear(self) -> None: ...

    def lookup_by_hash(
        self, token_hash: str, extra: Optional[RecordPredicate] = None
    ) -> Optional[TokenRecord]:
        rec = self.get(token_hash)
        if rec is None:
            return None
        if extra is not None and not extra(rec):
            return None
        return rec


class MemoryTokenStore(TokenStore):
    """Process-wide dict guarded by a lock. Lives for the process lifetime.

    Expired records are dropped when looked up, and ``put`` sweeps the whole
    map at most once every ``sweep_interval`` seconds.
    """

    def __init__(self, clock: Clock = time.time, *, sweep_interval: float = SWEEP_INTERVAL_SECONDS) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Dict[str, TokenRecord] = {}
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def put(self, key: str, record: TokenRecord) -> None:
        if not key:
            raise ValueError("Empty store key")
        with self._lock:
            self._records[key] = record
        if self._clock() - self._last_sweep >= self._sweep_interval:
            self.delete_expired()

    def get(self, key: str) -> Optional[TokenRecord]:
        if not key:
            return None
        now = self._clock()
        with self._lock:
            rec = self._records.get(key)
            if rec is not None and rec.is_expired(now):
                del self._records[key]
                rec = None
        return rec

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._records.pop(key, None) is not None

    def delete_where(self, predicate: RecordPredicate) -> int:
        with self._lock:
            doomed = [k for k, rec in self._records.items() if predicate(rec)]
            for k in doomed:
                del self._records[k]
        return len(doomed)

    def delete_expired(self) -> int:
        now = self._clock()
        self._last_sweep = now
        return self.delete_where(lambda rec: rec.is_expired(now))

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
