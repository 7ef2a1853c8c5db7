# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from woldecks.auth.passwords import CredentialRecord, StoredCredential
from woldecks.errors import DependencyError

logger = logging.getLogger(__name__)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _load_credential(raw: Dict[str, Any]) -> StoredCredential:
    stored = raw.get("password") or {}
    try:
        return CredentialRecord.from_dict(stored)
    except (KeyError, TypeError, ValueError):
        logger.warning("post=%s has a malformed credential record", raw.get("id"))
        return stored


def _credential_dict(credential: StoredCredential) -> Any:
    if isinstance(credential, CredentialRecord):
        return credential.to_dict()
    return credential


@dataclass(frozen=True)
class Post:
    id: str
    title: str
    author: str
    content: str
    credential: StoredCredential
    created_at: str
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "content": self.content,
            "password": _credential_dict(self.credential),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Post":
        return cls(
            id=str(raw["id"]),
            title=str(raw.get("title") or ""),
            author=str(raw.get("author") or ""),
            content=str(raw.get("content") or ""),
            credential=_load_credential(raw),
            created_at=str(raw.get("created_at") or ""),
            updated_at=raw.get("updated_at"),
        )

    def public(self, *, with_content: bool = True) -> Dict[str, Any]:
        """Client-facing view. Never includes the credential record."""
        out: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if with_content:
            out["content"] = self.content
        return out


class PostRepository:
    """Posts kept in one JSON file, rewritten atomically on every change."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> List[Post]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            items = raw.get("posts") if isinstance(raw, dict) else None
            return [Post.from_dict(p) for p in (items or [])]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error("cannot read %s: %s", self.path, type(e).__name__)
            raise DependencyError() from e

    def _write(self, posts: List[Post]) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = {"posts": [p.to_dict() for p in posts]}
            tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.error("cannot write %s: %s", self.path, type(e).__name__)
            raise DependencyError() from e

    def list_posts(self) -> List[Post]:
        with self._lock:
            posts = self._read()
        return sorted(posts, key=lambda p: p.created_at, reverse=True)

    def get(self, post_id: str) -> Optional[Post]:
        with self._lock:
            posts = self._read()
        return next((p for p in posts if p.id == post_id), None)

    def create(self, *, title: str, author: str, content: str, credential: CredentialRecord) -> Post:
        post = Post(
            id=str(uuid.uuid4()),
            title=title,
            author=author,
            content=content,
            credential=credential,
            created_at=utcnow_iso(),
        )
        with self._lock:
            posts = self._read()
            posts.insert(0, post)
            self._write(posts)
        return post

    def update(self, post_id: str, *, title: str, content: str) -> Optional[Post]:
        with self._lock:
            posts = self._read()
            for i, p in enumerate(posts):
                if p.id == post_id:
                    posts[i] = replace(p, title=title, content=content, updated_at=utcnow_iso())
                    self._write(posts)
                    return posts[i]
        return None

    def delete(self, post_id: str) -> bool:
        with self._lock:
            posts = self._read()
            kept = [p for p in posts if p.id != post_id]
            if len(kept) == len(posts):
                return False
            self._write(kept)
        return True
