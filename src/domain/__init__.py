"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account lifecycle state machine (pending ->
verified), the one-time code protocol and the read-only admin views. It
defines its own port interfaces for infrastructure abstraction, ensuring
true hexagonal architecture decoupling.
"""

from .admin import AdminService
from .entities import AccountStats, OtpCode, PendingUser, User
from .exceptions import (
    AccountError,
    AuthError,
    ConflictError,
    DeliveryFailed,
    NotFoundError,
    OtpError,
    ValidationFailed,
)
from .otp import OtpService
from .ports import AccountRepository, EmailSender, OtpPurpose, OtpRepository, OtpResult
from .registration import RegistrationService

__all__ = [
    "AccountError",
    "AccountRepository",
    "AccountStats",
    "AdminService",
    "AuthError",
    "ConflictError",
    "DeliveryFailed",
    "EmailSender",
    "NotFoundError",
    "OtpCode",
    "OtpError",
    "OtpPurpose",
    "OtpRepository",
    "OtpResult",
    "OtpService",
    "PendingUser",
    "RegistrationService",
    "User",
    "ValidationFailed",
]
