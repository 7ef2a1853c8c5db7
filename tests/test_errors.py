from woldecks.errors import (
    AuthenticationError,
    DependencyError,
    ErrorKind,
    NotFoundError,
    Result,
    ValidationError,
    run_guarded,
)


def test_run_guarded_maps_known_errors():
    def boom():
        raise AuthenticationError("Invalid password")

    r = run_guarded(boom)
    assert not r.ok
    assert r.error is ErrorKind.AUTHENTICATION
    assert r.status_code == 401
    assert r.message == "Invalid password"


def test_run_guarded_hides_unexpected_errors():
    def boom():
        raise KeyError("internal detail")

    r = run_guarded(boom)
    assert r.error is ErrorKind.INTERNAL
    assert r.status_code == 500
    assert "internal detail" not in r.message


def test_run_guarded_success():
    r: Result = run_guarded(lambda: 42)
    assert r.ok and r.value == 42 and r.status_code == 200


def test_error_kinds_map_to_status_codes():
    assert ValidationError().status_code == 400
    assert NotFoundError().status_code == 404
    assert DependencyError().status_code == 503
