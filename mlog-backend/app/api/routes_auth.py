# File: app/api/routes_auth.py

"""
Auth API routes: signup, login, email availability.

Route prefix: /api/auth
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import EmailStr

from app.api.deps import get_auth_service
from app.core.result import Err
from app.schemas.user import (
    EmailAvailability,
    LoginResponse,
    Message,
    UserCreate,
    UserLogin,
    UserSummary,
)
from app.services.auth_service import AuthService

router = APIRouter()


def error_response(err: Err) -> JSONResponse:
    """Business failures are reported as 400 with the reason as the message."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": err.message},
    )


@router.post(
    "/signup",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
def signup(payload: UserCreate, service: AuthService = Depends(get_auth_service)):
    result = service.signup(payload.email, payload.password, payload.name)
    if isinstance(result, Err):
        return error_response(result)
    return Message(message="Signup completed.")


@router.post("/login", response_model=LoginResponse, summary="Login with email + password")
def login(payload: UserLogin, service: AuthService = Depends(get_auth_service)):
    result = service.login(payload.email, payload.password)
    if isinstance(result, Err):
        return error_response(result)

    user = service.get_user(payload.email)
    if isinstance(user, Err):
        return error_response(user)
    return LoginResponse(token=result.value, user=UserSummary.model_validate(user.value))


@router.get("/check-email", response_model=EmailAvailability, summary="Is this email still free?")
def check_email(
    email: EmailStr = Query(...),
    service: AuthService = Depends(get_auth_service),
):
    return EmailAvailability(available=service.is_email_available(email))
