# Pydantic schemas describing the password recovery payloads.
from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# Fields stay optional so blanks reach the service and come back as 400s.
class ForgotPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    handle: Optional[str] = Field(default=None, validation_alias=AliasChoices("handle", "github"))
    user_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("user_name", "userName", "secondaryIdentifier"),
    )


# Input needed to confirm a password reset.
class ResetPasswordRequest(ForgotPasswordRequest):
    reset_code: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("reset_code", "resetCode", "suppliedCode"),
    )
    new_password: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("new_password", "newPassword", "newCredential"),
    )


class MessageResponse(BaseModel):
    message: str
    dev_reset_code: Optional[str] = None

