from pathlib import Path

import pytest
import yaml

from woldecks.auth.passwords import hash_admin_password, verify_admin_password
from woldecks.config import load_settings


@pytest.fixture()
def env(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("WOLDECKS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("WOLDECKS_SECRET_KEY", "k")
    monkeypatch.setenv("WOLDECKS_TOKEN_PEPPER", "p")
    for name in ("WOLDECKS_ADMIN_PASSWORD", "WOLDECKS_ADMIN_PATH", "WOLDECKS_POSTS_PATH",
                 "WOLDECKS_PBKDF2_ITERATIONS", "WOLDECKS_ADMIN_TTL", "WOLDECKS_VIEW_TTL",
                 "WOLDECKS_COOKIE_SECURE"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def test_defaults(env):
    s = load_settings()
    assert s.posts_path == (env / "posts.json").resolve()
    assert s.admin_ttl == 86400
    assert s.view_ttl == 3600
    assert s.admin_password_hash == ""
    assert s.cookie_secure is False


def test_admin_hash_from_yaml(env):
    h = hash_admin_password("from-file")
    (env / "admin.yml").write_text(yaml.safe_dump({"password_hash": h}), encoding="utf-8")
    assert load_settings().admin_password_hash == h


def test_admin_plaintext_fallback_is_hashed(env, monkeypatch):
    monkeypatch.setenv("WOLDECKS_ADMIN_PASSWORD", "plain")
    s = load_settings()
    assert s.admin_password_hash != "plain"
    assert verify_admin_password(s.admin_password_hash, "plain")


@pytest.mark.parametrize("missing", ["WOLDECKS_SECRET_KEY", "WOLDECKS_TOKEN_PEPPER"])
def test_missing_secrets_fail_fast(env, monkeypatch, missing):
    monkeypatch.delenv(missing)
    with pytest.raises(RuntimeError):
        load_settings()


def test_iterations_floor(env, monkeypatch):
    monkeypatch.setenv("WOLDECKS_PBKDF2_ITERATIONS", "1000")
    with pytest.raises(RuntimeError):
        load_settings()


def test_ttl_overrides(env, monkeypatch):
    monkeypatch.setenv("WOLDECKS_VIEW_TTL", "60")
    monkeypatch.setenv("WOLDECKS_COOKIE_SECURE", "yes")
    s = load_settings()
    assert s.view_ttl == 60
    assert s.cookie_secure is True
