# File: app/core/security.py

"""
Security primitives for the M-Log API.

Two collaborators are defined here and handed to the auth service at
startup:
  - a password hasher (bcrypt, salted, configurable work factor)
  - a token issuer (signed JWT bound to the user's email)
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

import bcrypt
import jwt


class PasswordHasher(Protocol):
    def encode(self, plain: str) -> str: ...

    def matches(self, plain: str, hashed: str) -> bool: ...


class TokenIssuer(Protocol):
    def create_token(self, subject: str) -> str: ...


def _password_bytes(plain: str) -> bytes:
    # Lone surrogates survive JSON decoding; bcrypt only reads the first 72 bytes
    return plain.encode("utf-8", "surrogatepass")[:72]


class BcryptPasswordHasher:
    """One-way bcrypt hash + verify."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def encode(self, plain: str) -> str:
        return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt(rounds=self.rounds)).decode()

    def matches(self, plain: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(_password_bytes(plain), hashed.encode())
        except (ValueError, TypeError):
            return False


class JwtTokenIssuer:
    """
    Issues HS256 (by default) bearer tokens.

    Payload: sub (email), iat, exp. Refresh and revocation are out of
    scope; decode_subject only exists so the API can resolve a principal.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60 * 24,
    ) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def create_token(self, subject: str, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode = {"sub": subject, "iat": now, "exp": expire}
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_subject(self, token: str) -> Optional[str]:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.InvalidTokenError:
            return None
        subject = payload.get("sub")
        return subject if isinstance(subject, str) and subject else None
