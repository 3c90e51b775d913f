# File: app/core/result.py

"""
Tagged result type returned by the service layer.

Business failures are values, not exceptions: a service call returns
either ``Ok(value)`` or ``Err(kind, message)`` and the API layer decides
how to render it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class AuthErrorKind(str, Enum):
    DUPLICATE_EMAIL = "duplicate_email"
    UNKNOWN_USER = "unknown_user"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_PASSWORD = "invalid_password"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: AuthErrorKind
    message: str


Result = Union[Ok[T], Err]
