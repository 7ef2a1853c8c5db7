import pytest

from woldecks.auth import tokens

PEPPER = "pepper"


def _flip(s: str, i: int) -> str:
    c = "A" if s[i] != "A" else "B"
    return s[:i] + c + s[i + 1 :]


def test_issue_and_verify():
    t = tokens.issue(PEPPER)
    assert tokens.verify(t.secret + "." + t.salt, t.hash, t.salt, PEPPER)
    assert t.presented == f"{t.secret}.{t.salt}"


def test_issued_tokens_are_distinct():
    a, b = tokens.issue(PEPPER), tokens.issue(PEPPER)
    assert a.secret != b.secret
    assert a.salt != b.salt
    assert a.hash != b.hash


def test_secret_entropy():
    t = tokens.issue(PEPPER)
    assert len(t.secret) >= 22  # 128+ bits of urlsafe base64
    assert "." not in t.secret


@pytest.mark.parametrize("i", [0, 5, -1])
def test_altering_secret_breaks_token(i):
    t = tokens.issue(PEPPER)
    secret = _flip(t.secret, i % len(t.secret))
    assert not tokens.verify(f"{secret}.{t.salt}", t.hash, t.salt, PEPPER)


@pytest.mark.parametrize("i", [0, 7, -1])
def test_altering_salt_breaks_token(i):
    t = tokens.issue(PEPPER)
    salt = _flip(t.salt, i % len(t.salt))
    assert not tokens.verify(f"{t.secret}.{salt}", t.hash, t.salt, PEPPER)


def test_wrong_pepper_breaks_token():
    t = tokens.issue(PEPPER)
    assert not tokens.verify(t.presented, t.hash, t.salt, "other")


def test_salt_substitution_rejected():
    t = tokens.issue(PEPPER)
    # A hash computed for a different salt must not be accepted against this record.
    forged = tokens.token_hash(t.secret, "deadbeef", PEPPER)
    assert not tokens.verify(f"{t.secret}.deadbeef", forged, t.salt, PEPPER)


@pytest.mark.parametrize("raw", [None, "", "nodot", ".salt", "secret.", 42, "."])
def test_parse_malformed(raw):
    assert tokens.parse(raw) is None
    assert tokens.verify(raw, "h", "s", PEPPER) is False


def test_parse_splits_on_last_separator():
    assert tokens.parse("a.b.c") == ("a.b", "c")


def test_issue_requires_pepper():
    with pytest.raises(ValueError):
        tokens.issue("")


def test_repr_does_not_leak_secret():
    t = tokens.issue(PEPPER)
    assert t.secret not in repr(t)
