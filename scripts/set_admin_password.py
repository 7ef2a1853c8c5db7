#!/usr/bin/env python3
from __future__ import annotations

import os
from getpass import getpass
from pathlib import Path

import yaml

from woldecks.auth.passwords import hash_admin_password

DATA_DIR = Path(os.getenv("WOLDECKS_DATA_DIR", "data")).resolve()
ADMIN_PATH = Path(os.getenv("WOLDECKS_ADMIN_PATH", str(DATA_DIR / "admin.yml"))).resolve()


def main() -> None:
    ADMIN_PATH.parent.mkdir(parents=True, exist_ok=True)
    if ADMIN_PATH.exists():
        raw = yaml.safe_load(ADMIN_PATH.read_text(encoding="utf-8")) or {}
    else:
        raw = {"version": 1}

    pw1 = getpass("Admin password: ")
    pw2 = getpass("Repeat password: ")
    if not pw1:
        raise SystemExit("Empty password")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    raw["password_hash"] = hash_admin_password(pw1)

    ADMIN_PATH.write_text(yaml.safe_dump(raw, sort_keys=False, allow_unicode=True), encoding="utf-8")
    print(f"OK -> {ADMIN_PATH}")


if __name__ == "__main__":
    main()
