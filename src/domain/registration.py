"""
Registration domain service - Account lifecycle state machine.

This module contains the core business logic for registration,
email verification, login and password reset, all gated by
email one-time codes.

Per-email states
================

    none -> pending      send-registration-code
    pending -> pending   send-registration-code (pending row overwritten)
                         resend-registration-code (code superseded)
    pending -> verified  verify-registration-code
    verified -> verified reset-password (password hash only)

There is no transition out of verified; a verified email can't be
registered again. States for different emails never interact.

Delivery failures surface to the caller after the pending row and code
are already stored. The user recovers through resend.
"""

import re
from dataclasses import dataclass

import bcrypt

from .entities import User
from .exceptions import (
    CodeExpired,
    CodeMismatch,
    CodeNotFound,
    EmailAlreadyVerified,
    InvalidEmailFormat,
    MissingFields,
    NoPendingRegistration,
    NotVerified,
    PasswordTooLong,
    UserNotFound,
    WeakPassword,
    WrongPassword,
)
from .otp import OtpService
from .ports import AccountRepository, EmailSender, OtpPurpose, OtpResult

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# bcrypt only hashes the first 72 bytes; longer inputs are rejected
_BCRYPT_MAX_BYTES = 72

_OTP_FAILURES = {
    OtpResult.NOT_FOUND: CodeNotFound,
    OtpResult.MISMATCH: CodeMismatch,
    OtpResult.EXPIRED: CodeExpired,
}


@dataclass
class RegistrationService:
    """
    Domain service for the registration, verification and reset flows.

    Orchestrates the account repository, the OTP service and the email
    sender. All collaborators are injected so tests can substitute fakes.
    """

    accounts: AccountRepository
    otp_service: OtpService
    email_sender: EmailSender
    bcrypt_cost: int = 12
    min_password_length: int = 6

    def send_registration_code(
        self,
        email: str | None,
        full_name: str | None,
        phone: str | None,
        password: str | None,
        photo: str | None = None,
    ) -> str:
        """
        Stage a registration and email a register code.

        Args:
            email: Email address to register
            full_name: Display name
            phone: Phone number
            password: Chosen password (hashed before storage)
            photo: Optional photo reference

        Returns:
            The stripped email address

        Raises:
            MissingFields, WeakPassword, PasswordTooLong, InvalidEmailFormat,
            EmailAlreadyVerified, DeliveryFailed
        """
        self._require(email, full_name, phone, password, message="All fields are required.")
        self._check_password(password)
        email = self._normalize_email(email)
        if not _EMAIL_PATTERN.match(email):
            raise InvalidEmailFormat()

        if self.accounts.get_verified_user(email) is not None:
            raise EmailAlreadyVerified(email)

        password_hash = self._hash_password(password)
        self.accounts.upsert_pending(email, full_name, phone, password_hash, photo or None)

        code = self.otp_service.issue(email, OtpPurpose.REGISTER)
        self.email_sender.send_code(email, code, OtpPurpose.REGISTER)
        return email

    def verify_registration_code(self, email: str | None, code: str | None) -> User:
        """
        Promote a pending registration to a verified user.

        The code is only consumed together with the promotion. A valid code
        with no pending registration leaves everything untouched.

        Raises:
            MissingFields, CodeNotFound, CodeMismatch, CodeExpired,
            NoPendingRegistration
        """
        self._require(email, code, message="Email and code are required.")
        email = self._normalize_email(email)

        result, otp = self.otp_service.match(email, code, OtpPurpose.REGISTER)
        self._raise_for_otp(result)

        user = self.accounts.promote_pending(email, otp.id)
        if user is None:
            raise NoPendingRegistration("Registration details not found. Please register again.")
        return user

    def resend_registration_code(self, email: str | None) -> None:
        """
        Issue a fresh register code for a pending registration.

        Raises:
            MissingFields, NoPendingRegistration, DeliveryFailed
        """
        self._require(email, message="Email address is required.")
        email = self._normalize_email(email)

        if self.accounts.get_pending(email) is None:
            raise NoPendingRegistration()

        code = self.otp_service.issue(email, OtpPurpose.REGISTER)
        self.email_sender.send_code(email, code, OtpPurpose.REGISTER)

    def login(self, email: str | None, password: str | None) -> User:
        """
        Check credentials for a verified user.

        Unlike forgot_password, login tells "no account" apart from
        "wrong password".

        Raises:
            MissingFields, UserNotFound, NotVerified, WrongPassword
        """
        self._require(email, password, message="Email and password are required.")
        email = self._normalize_email(email)

        user = self.accounts.get_user(email)
        if user is None:
            raise UserNotFound()
        if not user.verified:
            raise NotVerified()
        if not self._verify_password(password, user.password_hash):
            raise WrongPassword()
        return user

    def forgot_password(self, email: str | None) -> None:
        """
        Email a reset code if a verified user owns the address.

        Returns normally whether or not the account exists, so callers can't
        enumerate accounts. Delivery failure is only possible when it does.

        Raises:
            MissingFields, DeliveryFailed
        """
        self._require(email, message="Email address is required.")
        email = self._normalize_email(email)

        if self.accounts.get_verified_user(email) is None:
            return

        code = self.otp_service.issue(email, OtpPurpose.FORGOT)
        self.email_sender.send_code(email, code, OtpPurpose.FORGOT)

    def reset_password(
        self, email: str | None, code: str | None, new_password: str | None
    ) -> None:
        """
        Replace a user's password hash using a forgot code.

        Raises:
            MissingFields, WeakPassword, PasswordTooLong, CodeNotFound,
            CodeMismatch, CodeExpired
        """
        self._require(email, code, new_password, message="All fields are required.")
        self._check_password(new_password)
        email = self._normalize_email(email)

        result, otp = self.otp_service.match(email, code, OtpPurpose.FORGOT)
        self._raise_for_otp(result)

        self.accounts.reset_password(email, otp.id, self._hash_password(new_password))

    def _require(self, *values: str | None, message: str) -> None:
        """None and empty strings both count as missing."""
        if any(not value for value in values):
            raise MissingFields(message)

    def _check_password(self, password: str) -> None:
        if len(password) < self.min_password_length:
            raise WeakPassword(
                f"Password must be at least {self.min_password_length} characters."
            )
        if len(password.encode()) > _BCRYPT_MAX_BYTES:
            raise PasswordTooLong()

    def _raise_for_otp(self, result: OtpResult) -> None:
        if result is not OtpResult.SUCCESS:
            raise _OTP_FAILURES[result]()

    def _normalize_email(self, email: str) -> str:
        """
        Strip surrounding whitespace.

        Case is preserved: accounts are keyed by the email exactly as stored.
        """
        return email.strip()

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()

    def _verify_password(self, password: str, password_hash: str) -> bool:
        if len(password.encode()) > _BCRYPT_MAX_BYTES:
            return False
        return bcrypt.checkpw(password.encode(), password_hash.encode())
