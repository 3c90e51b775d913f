# File: app/api/routes_user.py

"""
Routes for the authenticated user.

Route prefix: /api/user
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_auth_service, require_principal
from app.api.routes_auth import error_response
from app.core.result import Err
from app.schemas.user import Message, PasswordChange, UserRead
from app.services.auth_service import AuthService

router = APIRouter()


@router.get("", response_model=UserRead, summary="Current user's profile")
def read_current_user(
    principal: str = Depends(require_principal),
    service: AuthService = Depends(get_auth_service),
):
    result = service.get_user(principal)
    if isinstance(result, Err):
        return error_response(result)
    return UserRead.model_validate(result.value)


@router.put("/password", response_model=Message, summary="Change own password")
def change_password(
    payload: PasswordChange,
    principal: str = Depends(require_principal),
    service: AuthService = Depends(get_auth_service),
):
    result = service.change_password(principal, payload.current_password, payload.new_password)
    if isinstance(result, Err):
        return error_response(result)
    return Message(message="Password changed successfully.")
