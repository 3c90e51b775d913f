# File: tests/test_auth_service.py

import pytest
from sqlalchemy import func, select

from app.core.result import AuthErrorKind, Err, Ok
from app.models.user import User
from app.repositories.user_repo import SqlAlchemyUserRepository
from app.services.auth_service import AuthService, PasswordPolicy


def _stored_hash(repo, email):
    with repo.transaction():
        return repo.find_by_email(email).password_hash


def test_signup_then_login_returns_token(service):
    assert service.signup("a@x.com", "pw1", "Al") == Ok(None)

    result = service.login("a@x.com", "pw1")
    assert isinstance(result, Ok)
    assert result.value


def test_signup_stores_hash_not_plaintext(service, repo):
    service.signup("a@x.com", "pw1", "Al")

    stored = _stored_hash(repo, "a@x.com")
    assert stored != "pw1"
    assert stored.startswith("$2")


def test_signup_duplicate_email_is_rejected(service, repo):
    service.signup("a@x.com", "pw1", "Al")
    before = _stored_hash(repo, "a@x.com")

    result = service.signup("a@x.com", "other", "Bob")

    assert isinstance(result, Err)
    assert result.kind is AuthErrorKind.DUPLICATE_EMAIL
    assert result.message
    user = service.get_user("a@x.com").value
    assert user.name == "Al"
    assert user.password_hash == before


class _BlindRepository(SqlAlchemyUserRepository):
    """Never sees existing rows, like a concurrent signup racing the check."""

    def exists_by_email(self, email):
        return False


def test_duplicate_signup_caught_by_unique_constraint(db, hasher, token_issuer):
    service = AuthService(_BlindRepository(db), hasher, token_issuer)
    assert isinstance(service.signup("a@x.com", "pw1", "Al"), Ok)

    result = service.signup("a@x.com", "pw2", "Bob")

    assert isinstance(result, Err)
    assert result.kind is AuthErrorKind.DUPLICATE_EMAIL
    with db.begin():
        assert db.scalar(select(func.count()).select_from(User)) == 1
    assert isinstance(service.login("a@x.com", "pw1"), Ok)


def test_login_wrong_password(service):
    service.signup("a@x.com", "pw1", "Al")

    result = service.login("a@x.com", "nope")

    assert isinstance(result, Err)
    assert result.kind is AuthErrorKind.INVALID_CREDENTIALS


def test_login_unknown_email(service):
    result = service.login("ghost@x.com", "pw1")

    assert isinstance(result, Err)
    assert result.kind is AuthErrorKind.UNKNOWN_USER


def test_login_token_is_bound_to_email(service, token_issuer):
    service.signup("a@x.com", "pw1", "Al")

    token = service.login("a@x.com", "pw1").value

    assert token_issuer.decode_subject(token) == "a@x.com"


def test_get_user(service):
    service.signup("a@x.com", "pw1", "Al")

    found = service.get_user("a@x.com")
    assert isinstance(found, Ok)
    assert found.value.email == "a@x.com"
    assert found.value.name == "Al"
    assert found.value.id is not None

    missing = service.get_user("ghost@x.com")
    assert isinstance(missing, Err)
    assert missing.kind is AuthErrorKind.UNKNOWN_USER


def test_is_email_available(service):
    assert service.is_email_available("a@x.com") is True
    service.signup("a@x.com", "pw1", "Al")
    assert service.is_email_available("a@x.com") is False


def test_change_password_then_login(service):
    service.signup("a@x.com", "pw1", "Al")

    assert service.change_password("a@x.com", "pw1", "pw2") == Ok(None)

    assert isinstance(service.login("a@x.com", "pw2"), Ok)
    old = service.login("a@x.com", "pw1")
    assert isinstance(old, Err)
    assert old.kind is AuthErrorKind.INVALID_CREDENTIALS


def test_change_password_wrong_current_leaves_hash(service, repo):
    service.signup("a@x.com", "pw1", "Al")
    before = _stored_hash(repo, "a@x.com")

    result = service.change_password("a@x.com", "wrong", "pw2")

    assert isinstance(result, Err)
    assert result.kind is AuthErrorKind.INVALID_CREDENTIALS
    assert _stored_hash(repo, "a@x.com") == before


def test_change_password_unknown_user(service):
    result = service.change_password("ghost@x.com", "pw1", "pw2")

    assert isinstance(result, Err)
    assert result.kind is AuthErrorKind.UNKNOWN_USER


def test_worked_example(service):
    service.signup("a@x.com", "pw1", "Al")
    t1 = service.login("a@x.com", "pw1")
    assert isinstance(t1, Ok) and t1.value

    assert isinstance(service.change_password("a@x.com", "pw1", "pw2"), Ok)

    stale = service.login("a@x.com", "pw1")
    assert isinstance(stale, Err)
    assert stale.kind is AuthErrorKind.INVALID_CREDENTIALS

    t2 = service.login("a@x.com", "pw2")
    assert isinstance(t2, Ok) and t2.value


class _FailingSaveRepository(SqlAlchemyUserRepository):
    """Writes the row, then fails before the transaction can commit."""

    def save(self, user):
        super().save(user)
        raise RuntimeError("storage went away")


def test_change_password_rolls_back_on_failure(db, service, hasher, token_issuer):
    service.signup("a@x.com", "pw1", "Al")
    failing = AuthService(_FailingSaveRepository(db), hasher, token_issuer)

    with pytest.raises(RuntimeError):
        failing.change_password("a@x.com", "pw1", "pw2")

    assert isinstance(service.login("a@x.com", "pw1"), Ok)
    assert isinstance(service.login("a@x.com", "pw2"), Err)


def test_signup_rolls_back_on_failure(db, service, hasher, token_issuer):
    failing = AuthService(_FailingSaveRepository(db), hasher, token_issuer)

    with pytest.raises(RuntimeError):
        failing.signup("a@x.com", "pw1", "Al")

    assert service.is_email_available("a@x.com") is True


def test_password_policy_rejects_weak_passwords(repo, hasher, token_issuer):
    strict = AuthService(
        repo,
        hasher,
        token_issuer,
        PasswordPolicy(min_length=8, require_digit=True, require_special=True),
    )

    for weak in ("", "short1!", "longenough!", "longenough1"):
        result = strict.signup("a@x.com", weak, "Al")
        assert isinstance(result, Err)
        assert result.kind is AuthErrorKind.INVALID_PASSWORD

    assert strict.is_email_available("a@x.com") is True
    assert isinstance(strict.signup("a@x.com", "goodpass1!", "Al"), Ok)

    result = strict.change_password("a@x.com", "goodpass1!", "weak")
    assert isinstance(result, Err)
    assert result.kind is AuthErrorKind.INVALID_PASSWORD
    assert isinstance(strict.login("a@x.com", "goodpass1!"), Ok)


def test_password_policy_limits_bcrypt_input():
    policy = PasswordPolicy()

    assert policy.violation("a" * 72) is None
    assert policy.violation("a" * 73) is not None
    # multi-byte characters count by encoded size
    assert policy.violation("é" * 37) is not None


def test_password_with_lone_surrogate_is_rejected(service):
    result = service.signup("a@x.com", "pw1\ud800", "Al")

    assert isinstance(result, Err)
    assert result.kind is AuthErrorKind.INVALID_PASSWORD
    assert result.message == "Password contains invalid characters."
    assert service.is_email_available("a@x.com") is True

    service.signup("a@x.com", "pw1", "Al")
    result = service.change_password("a@x.com", "pw1", "pw2\udfff")
    assert isinstance(result, Err)
    assert result.kind is AuthErrorKind.INVALID_PASSWORD
    assert isinstance(service.login("a@x.com", "pw1"), Ok)


def test_login_with_lone_surrogate_is_a_mismatch(service):
    service.signup("a@x.com", "pw1", "Al")

    result = service.login("a@x.com", "pw1\ud800")

    assert isinstance(result, Err)
    assert result.kind is AuthErrorKind.INVALID_CREDENTIALS
