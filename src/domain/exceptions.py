"""
Domain exceptions - Semantic error types for account flows.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each carries a caller-facing message; the API layer maps the
category (base class) to a status code.
"""


class AccountError(Exception):
    """Base class for account domain errors."""

    default_message = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# Validation - malformed or missing input, nothing mutated


class ValidationFailed(AccountError):
    """Input rejected before any state is touched."""

    default_message = "Invalid request."


class MissingFields(ValidationFailed):
    default_message = "All fields are required."


class WeakPassword(ValidationFailed):
    default_message = "Password must be at least 6 characters."


class PasswordTooLong(ValidationFailed):
    default_message = "Password must be at most 72 bytes."


class InvalidEmailFormat(ValidationFailed):
    default_message = "Invalid email address."


# Conflict


class ConflictError(AccountError):
    default_message = "Conflict."


class EmailAlreadyVerified(ConflictError):
    """A verified user already owns this email."""

    default_message = "This email address is already registered."


# Not found


class NotFoundError(AccountError):
    default_message = "Not found."


class NoPendingRegistration(NotFoundError):
    default_message = "No pending registration found. Please register again."


class UserNotFound(NotFoundError):
    default_message = "No account is registered with this email."


class CodeNotFound(NotFoundError):
    """No live code for (email, purpose), or it was superseded or consumed."""

    default_message = "Code not found. Request a new code."


# One-time code failures - the code stays live for retries


class OtpError(AccountError):
    default_message = "Invalid code."


class CodeMismatch(OtpError):
    default_message = "Incorrect code. Try again."


class CodeExpired(OtpError):
    default_message = "Code has expired. Request a new code."


# Authentication


class AuthError(AccountError):
    default_message = "Authentication failed."


class NotVerified(AuthError):
    default_message = "Your account has not been verified yet. Check your email."


class WrongPassword(AuthError):
    default_message = "Incorrect password."


class Unauthorized(AuthError):
    default_message = "Unauthorized."


# Delivery


class DeliveryFailed(AccountError):
    """Outbound email transport fault; the underlying cause is only logged."""

    default_message = "Email could not be sent. Please try again."
