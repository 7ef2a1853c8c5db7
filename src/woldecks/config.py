# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from woldecks.auth.engine import ADMIN_TTL_SECONDS, VIEW_TTL_SECONDS
from woldecks.auth.passwords import MIN_ITERATIONS, PBKDF2_ITERATIONS, hash_admin_password

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    posts_path: Path
    admin_password_hash: str
    secret_key: str
    token_pepper: str
    admin_ttl: int = ADMIN_TTL_SECONDS
    view_ttl: int = VIEW_TTL_SECONDS
    pbkdf2_iterations: int = PBKDF2_ITERATIONS
    cookie_secure: bool = False
    log_level: str = "INFO"


def load_admin_hash(path: Path) -> str:
    """Read ``password_hash`` from the admin YAML file ('' if absent)."""
    if not path.exists():
        return ""
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        return ""
    return str(raw.get("password_hash") or "").strip()


def load_settings() -> Settings:
    data_dir = Path(os.getenv("WOLDECKS_DATA_DIR", "data")).resolve()
    posts_path = Path(os.getenv("WOLDECKS_POSTS_PATH", str(data_dir / "posts.json"))).resolve()
    admin_path = Path(os.getenv("WOLDECKS_ADMIN_PATH", str(data_dir / "admin.yml"))).resolve()

    secret_key = os.getenv("WOLDECKS_SECRET_KEY", "")
    if not secret_key:
        raise RuntimeError("Missing WOLDECKS_SECRET_KEY in environment")
    pepper = os.getenv("WOLDECKS_TOKEN_PEPPER", "")
    if not pepper:
        raise RuntimeError("Missing WOLDECKS_TOKEN_PEPPER in environment")

    admin_hash = load_admin_hash(admin_path)
    if not admin_hash:
        plain = os.getenv("WOLDECKS_ADMIN_PASSWORD", "")
        admin_hash = hash_admin_password(plain) if plain else ""

    iterations = _env_int("WOLDECKS_PBKDF2_ITERATIONS", PBKDF2_ITERATIONS)
    if iterations < MIN_ITERATIONS:
        raise RuntimeError(f"WOLDECKS_PBKDF2_ITERATIONS must be >= {MIN_ITERATIONS}")

    return Settings(
        posts_path=posts_path,
        admin_password_hash=admin_hash,
        secret_key=secret_key,
        token_pepper=pepper,
        admin_ttl=_env_int("WOLDECKS_ADMIN_TTL", ADMIN_TTL_SECONDS),
        view_ttl=_env_int("WOLDECKS_VIEW_TTL", VIEW_TTL_SECONDS),
        pbkdf2_iterations=iterations,
        cookie_secure=_env_bool("WOLDECKS_COOKIE_SECURE"),
        log_level=os.getenv("WOLDECKS_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
