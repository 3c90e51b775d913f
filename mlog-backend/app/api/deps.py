# File: app/api/deps.py

from collections.abc import Generator
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.repositories.user_repo import SqlAlchemyUserRepository
from app.services.auth_service import AuthService

_bearer_scheme = HTTPBearer(auto_error=False)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a SQLAlchemy session from the
    application's session factory.

    Usage in route functions:
        db: Session = Depends(get_db)
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_auth_service(request: Request, db: Session = Depends(get_db)) -> AuthService:
    state = request.app.state
    return AuthService(
        SqlAlchemyUserRepository(db),
        state.password_hasher,
        state.token_issuer,
        state.password_policy,
    )


def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[str]:
    """
    Resolve the authenticated principal (the user's email) from a bearer
    token. Returns None when the header is missing or the token is invalid.
    """
    if credentials is None:
        return None
    return request.app.state.token_issuer.decode_subject(credentials.credentials)


UNAUTHENTICATED_MESSAGE = "User is not authenticated."


def require_principal(principal: Optional[str] = Depends(get_current_principal)) -> str:
    """
    Like get_current_principal but answers 401 when nobody is logged in.
    Dependencies resolve before the request body is validated, so an
    anonymous caller gets 401 even with a malformed body.
    """
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=UNAUTHENTICATED_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal
