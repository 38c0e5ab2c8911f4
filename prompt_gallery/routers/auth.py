# prompt_gallery/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from prompt_gallery.database import get_session
from prompt_gallery.dependencies import get_auth_service, get_otp_service
from prompt_gallery.schemas.otp import (
    MessageRead,
    OTPSentRead,
    ResetPasswordRequest,
    SendOTPRequest,
    SignupWithOTPRequest,
    VerifyOTPRequest,
)
from prompt_gallery.schemas.user import AuthResponse, LoginRequest, RegisterRequest
from prompt_gallery.services.auth_service import AuthService
from prompt_gallery.services.otp_service import OTPService

router = APIRouter(prefix="/auth", tags=["Auth"])


# -------- Password auth --------


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Create an account and return an access token.

    409 if the username or email is taken.
    """
    return service.register(session, payload)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Exchange email + password for an access token.

    401 on bad credentials, 403 for deactivated accounts.
    """
    return service.login(session, payload)


# -------- OTP flows --------


@router.post("/send-otp", response_model=OTPSentRead)
def send_otp(
    payload: SendOTPRequest,
    session: Session = Depends(get_session),
    service: OTPService = Depends(get_otp_service),
):
    """
    Email a 6-digit code for `signup` or `forgot_password`.

    Any older unverified code for the same email and purpose stops working.
    """
    return service.send_otp(session, payload)


@router.post("/verify-otp", response_model=MessageRead)
def verify_otp(
    payload: VerifyOTPRequest,
    session: Session = Depends(get_session),
    service: OTPService = Depends(get_otp_service),
):
    """
    Confirm a code without consuming it.
    """
    service.verify_otp(session, payload)
    return {"message": "OTP verified successfully"}


@router.post(
    "/signup-with-otp",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
def signup_with_otp(
    payload: SignupWithOTPRequest,
    session: Session = Depends(get_session),
    service: OTPService = Depends(get_otp_service),
):
    """
    Finish signup with a previously verified code.
    """
    return service.signup_with_otp(session, payload)


@router.post("/reset-password", response_model=MessageRead)
def reset_password(
    payload: ResetPasswordRequest,
    session: Session = Depends(get_session),
    service: OTPService = Depends(get_otp_service),
):
    """
    Set a new password with a previously verified `forgot_password` code.
    """
    service.reset_password(session, payload)
    return {"message": "Password reset successfully"}
