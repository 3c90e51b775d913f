# File: app/services/auth_service.py

"""
Authentication service.

Orchestrates signup, login, password change and user lookup on top of
three collaborators passed in at construction time:
  - a credential store (UserRepository)
  - a password hasher
  - a token issuer

Every operation runs inside one store transaction and returns a tagged
result (Ok / Err) instead of raising for business failures.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from app.core.result import AuthErrorKind, Err, Ok, Result
from app.core.security import PasswordHasher, TokenIssuer
from app.models.user import User
from app.repositories.user_repo import DuplicateRecordError, UserRepository

logger = logging.getLogger(__name__)

SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72

MSG_DUPLICATE_EMAIL = "This email is already registered."
MSG_EMAIL_NOT_REGISTERED = "This email is not registered."
MSG_PASSWORD_MISMATCH = "Password does not match."
MSG_USER_NOT_FOUND = "User not found."
MSG_CURRENT_PASSWORD_MISMATCH = "Current password does not match."


@dataclass(frozen=True)
class PasswordPolicy:
    min_length: int = 1
    require_digit: bool = False
    require_special: bool = False
    max_bytes: int = BCRYPT_MAX_BYTES

    def violation(self, password: Optional[str]) -> Optional[str]:
        """Return a user-facing reason the password is rejected, or None."""
        if not password:
            return "Password must not be empty."
        if len(password) < self.min_length:
            return f"Password must be at least {self.min_length} characters long."
        try:
            encoded = password.encode("utf-8")
        except UnicodeEncodeError:
            return "Password contains invalid characters."
        if len(encoded) > self.max_bytes:
            return f"Password must be at most {self.max_bytes} bytes long."
        if self.require_digit and not any(ch.isdigit() for ch in password):
            return "Password must contain at least one number."
        if self.require_special and not _SPECIAL_RE.search(password):
            return "Password must contain at least one special character."
        return None


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        password_policy: Optional[PasswordPolicy] = None,
    ) -> None:
        self.users = users
        self.hasher = hasher
        self.tokens = tokens
        self.password_policy = password_policy or PasswordPolicy()

    def signup(self, email: str, password: str, name: str) -> Result[None]:
        reason = self.password_policy.violation(password)
        try:
            with self.users.transaction():
                if self.users.exists_by_email(email):
                    logger.warning("Signup rejected, email already registered: %s", email)
                    return Err(AuthErrorKind.DUPLICATE_EMAIL, MSG_DUPLICATE_EMAIL)
                if reason is not None:
                    return Err(AuthErrorKind.INVALID_PASSWORD, reason)

                user = User(
                    email=email,
                    password_hash=self.hasher.encode(password),
                    name=name,
                )
                self.users.save(user)
        except DuplicateRecordError:
            # Lost a race with a concurrent signup; the unique constraint caught it
            logger.warning("Signup rejected by unique constraint: %s", email)
            return Err(AuthErrorKind.DUPLICATE_EMAIL, MSG_DUPLICATE_EMAIL)

        logger.info("Registered user %s", email)
        return Ok(None)

    def login(self, email: str, password: str) -> Result[str]:
        with self.users.transaction():
            user = self.users.find_by_email(email)
            if user is None:
                return Err(AuthErrorKind.UNKNOWN_USER, MSG_EMAIL_NOT_REGISTERED)
            if not self.hasher.matches(password or "", user.password_hash):
                logger.warning("Login failed for %s: password mismatch", email)
                return Err(AuthErrorKind.INVALID_CREDENTIALS, MSG_PASSWORD_MISMATCH)

        token = self.tokens.create_token(email)
        logger.info("Login: %s", email)
        return Ok(token)

    def get_user(self, email: str) -> Result[User]:
        with self.users.transaction():
            user = self.users.find_by_email(email)
        if user is None:
            return Err(AuthErrorKind.UNKNOWN_USER, MSG_USER_NOT_FOUND)
        return Ok(user)

    def is_email_available(self, email: str) -> bool:
        with self.users.transaction():
            return not self.users.exists_by_email(email)

    def change_password(
        self,
        email: str,
        current_password: str,
        new_password: str,
    ) -> Result[None]:
        with self.users.transaction():
            user = self.users.find_by_email(email)
            if user is None:
                return Err(AuthErrorKind.UNKNOWN_USER, MSG_USER_NOT_FOUND)
            if not self.hasher.matches(current_password or "", user.password_hash):
                logger.warning("Password change rejected for %s: current password mismatch", email)
                return Err(AuthErrorKind.INVALID_CREDENTIALS, MSG_CURRENT_PASSWORD_MISMATCH)

            reason = self.password_policy.violation(new_password)
            if reason is not None:
                return Err(AuthErrorKind.INVALID_PASSWORD, reason)

            user.password_hash = self.hasher.encode(new_password)
            self.users.save(user)

        logger.info("Password changed for %s", email)
        return Ok(None)
