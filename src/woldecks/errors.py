# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    DEPENDENCY = "dependency"
    INTERNAL = "internal"


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DEPENDENCY: 503,
    ErrorKind.INTERNAL: 500,
}


class WoldecksError(Exception):
    kind = ErrorKind.INTERNAL
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(WoldecksError):
    kind = ErrorKind.VALIDATION
    default_message = "Bad request"


class AuthenticationError(WoldecksError):
    kind = ErrorKind.AUTHENTICATION
    default_message = "Unauthorized"


class NotFoundError(WoldecksError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class DependencyError(WoldecksError):
    kind = ErrorKind.DEPENDENCY
    default_message = "Storage unavailable, try again"


class InternalError(WoldecksError):
    kind = ErrorKind.INTERNAL


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        return 200 if self.error is None else STATUS_BY_KIND[self.error]

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, exc: WoldecksError) -> "Result":
        return cls(error=exc.kind, message=exc.message)


def run_guarded(fn: Callable[..., T], *args: Any, **kwargs: Any) -> Result[T]:
    """Call ``fn`` and fold every outcome into a Result.

    Known errors keep their kind and public message. Anything else is
    logged here and reported as a generic internal error.
    """
    try:
        return Result.success(fn(*args, **kwargs))
    except WoldecksError as e:
        return Result.failure(e)
    except Exception:
        logger.exception("unhandled error in %s", getattr(fn, "__name__", fn))
        return Result.failure(InternalError())
