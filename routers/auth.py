from __future__ import annotations

# Authentication router covering the password recovery flow.
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from schemas.user import ForgotPasswordRequest, MessageResponse, ResetPasswordRequest
from services.dependencies import get_password_reset_service
from services.errors import PasswordResetError
from services.password_reset_service import PasswordResetService


router = APIRouter(prefix="/auth", tags=["auth"])


def _error_response(exc: PasswordResetError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@router.post("/forgot-password", response_model=MessageResponse, response_model_exclude_none=True)
# Issue a reset code if the handle/display name pair matches an account.
def forgot_password(
    payload: ForgotPasswordRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
):
    try:
        result = service.request_reset(payload.handle, payload.user_name)
    except PasswordResetError as exc:
        return _error_response(exc)
    return MessageResponse(message=result.message, dev_reset_code=result.dev_reset_code)


@router.post("/reset-password", response_model=MessageResponse, response_model_exclude_none=True)
# Finalize a password reset using the issued code.
def reset_password(
    payload: ResetPasswordRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
):
    try:
        message = service.reset_password(
            payload.handle,
            payload.user_name,
            payload.reset_code,
            payload.new_password,
        )
    except PasswordResetError as exc:
        return _error_response(exc)
    return MessageResponse(message=message)
