# prompt_gallery/schemas/otp.py
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

OTPPurpose = Literal["signup", "forgot_password"]


def _validate_code(v: str) -> str:
    v = v.strip()
    if len(v) != 6 or not v.isdigit():
        raise ValueError("otp must be exactly 6 digits")
    return v


class SendOTPRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    purpose: OTPPurpose


class OTPSentRead(SQLModel):
    email: str
    expires_at: datetime


class VerifyOTPRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    otp: str

    @field_validator("otp")
    @classmethod
    def validate_otp(cls, v: str) -> str:
        return _validate_code(v)


class SignupWithOTPRequest(SQLModel):
    """
    Finishes a signup whose code was already verified.
    """

    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str = Field(min_length=1, max_length=255)
    otp: str

    @field_validator("otp")
    @classmethod
    def validate_otp(cls, v: str) -> str:
        return _validate_code(v)

    @field_validator("username", "full_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ResetPasswordRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    otp: str
    new_password: str = Field(min_length=8)

    @field_validator("otp")
    @classmethod
    def validate_otp(cls, v: str) -> str:
        return _validate_code(v)


class MessageRead(SQLModel):
    message: str
