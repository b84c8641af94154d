"""
API v1 routes.

Defines REST endpoints for registration, verification, login and
password reset. Domain errors propagate to the handlers in
src.api.errors, which render them as ``{"ok": false, "error": ...}``.
"""

from fastapi import APIRouter, Depends, Request, status

from src.api.dependencies import get_registration_service
from src.api.models import (
    AuthResponse,
    EmailRequest,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SendCodeRequest,
    UserResponse,
    VerifyCodeRequest,
)
from src.api.rate_limit import LOGIN_LIMIT, OTP_SEND_LIMIT, limiter
from src.domain.registration import RegistrationService

router = APIRouter(tags=["v1"])

FORGOT_PASSWORD_MESSAGE = "If this email is registered, a reset code has been sent."

_VALIDATION = {400: {"model": ErrorResponse, "description": "Missing or invalid fields"}}
_DELIVERY = {502: {"model": ErrorResponse, "description": "Email could not be sent"}}
_RATE_LIMIT = {429: {"model": ErrorResponse, "description": "Too many requests"}}


@router.post(
    "/send-otp",
    response_model=MessageResponse,
    responses={
        **_VALIDATION,
        409: {"model": ErrorResponse, "description": "Email already registered"},
        **_DELIVERY,
        **_RATE_LIMIT,
    },
    summary="Start a registration",
    description="Stage the registration and email a 6-digit code. "
    "Submitting again for the same email replaces the staged details.",
)
@limiter.limit(OTP_SEND_LIMIT)
async def send_otp(
    request_data: SendCodeRequest,
    request: Request,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    service.send_registration_code(
        request_data.email,
        request_data.full_name,
        request_data.phone,
        request_data.password,
        request_data.photo,
    )
    return MessageResponse(message="A verification code has been sent to your email.")


@router.post(
    "/verify-otp",
    response_model=AuthResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields, wrong or expired code"},
        404: {"model": ErrorResponse, "description": "No code or no pending registration"},
    },
    summary="Verify a registration code",
    description="Complete the registration and create the verified account.",
)
async def verify_otp(
    request_data: VerifyCodeRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> AuthResponse:
    user = service.verify_registration_code(request_data.email, request_data.code)
    return AuthResponse(
        message="Your account has been created.", user=UserResponse.from_user(user)
    )


@router.post(
    "/resend-otp",
    response_model=MessageResponse,
    responses={
        **_VALIDATION,
        404: {"model": ErrorResponse, "description": "No pending registration"},
        **_DELIVERY,
        **_RATE_LIMIT,
    },
    summary="Resend a registration code",
    description="Issue a new code for a pending registration; the previous code stops working.",
)
@limiter.limit(OTP_SEND_LIMIT)
async def resend_otp(
    request_data: EmailRequest,
    request: Request,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    service.resend_registration_code(request_data.email)
    return MessageResponse(message="A new code has been sent to your email.")


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        **_VALIDATION,
        401: {"model": ErrorResponse, "description": "Not verified or wrong password"},
        404: {"model": ErrorResponse, "description": "No account for this email"},
        **_RATE_LIMIT,
    },
    summary="Log in",
    description="Check credentials of a verified account. Returns the user record; "
    "no session or token is issued.",
)
@limiter.limit(LOGIN_LIMIT)
async def login(
    request_data: LoginRequest,
    request: Request,
    service: RegistrationService = Depends(get_registration_service),
) -> AuthResponse:
    user = service.login(request_data.email, request_data.password)
    return AuthResponse(message="Login successful.", user=UserResponse.from_user(user))


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    responses={**_VALIDATION, **_DELIVERY, **_RATE_LIMIT},
    summary="Request a password reset code",
    description="Always answers with the same message whether or not the account exists.",
)
@limiter.limit(OTP_SEND_LIMIT)
async def forgot_password(
    request_data: EmailRequest,
    request: Request,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    service.forgot_password(request_data.email)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields, weak password, bad code"},
        404: {"model": ErrorResponse, "description": "No reset code"},
    },
    summary="Reset password with a code",
)
async def reset_password(
    request_data: ResetPasswordRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    service.reset_password(request_data.email, request_data.code, request_data.new_password)
    return MessageResponse(message="Your password has been updated.")
