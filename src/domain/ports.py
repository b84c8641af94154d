"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .entities import AccountStats, OtpCode, PendingUser, User


class OtpPurpose(str, Enum):
    """
    Scope of a one-time code.

    Registration and password-reset codes for the same email live side by
    side and never validate against each other.
    """

    REGISTER = "register"
    FORGOT = "forgot"


class OtpResult(Enum):
    """
    Result of checking a one-time code.

    Checks run in this order: NOT_FOUND, MISMATCH, EXPIRED.
    """

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    MISMATCH = "mismatch"
    EXPIRED = "expired"


class AccountRepository(Protocol):
    """Port interface for user and pending-registration persistence."""

    def get_user(self, email: str) -> User | None:
        """Return the user row for email, verified or not."""
        ...

    def get_verified_user(self, email: str) -> User | None:
        """Return the user for email only if it is verified."""
        ...

    def get_pending(self, email: str) -> PendingUser | None:
        """Return the staged registration for email, if any."""
        ...

    def upsert_pending(
        self,
        email: str,
        full_name: str,
        phone: str,
        password_hash: str,
        photo: str | None,
    ) -> None:
        """
        Stage a registration, replacing any previous one for the same email.

        Args:
            email: Stripped email address (case preserved)
            full_name: Display name
            phone: Phone number as supplied
            password_hash: bcrypt hash of the chosen password
            photo: Optional photo reference
        """
        ...

    def promote_pending(self, email: str, otp_id: int) -> User | None:
        """
        Turn a pending registration into a verified user, atomically.

        In one transaction: consume the register code identified by otp_id,
        upsert the user with verified=True from the pending fields, and
        delete the pending row.

        Returns:
            The verified user, or None when no pending registration exists
            (in which case nothing is mutated)

        Raises:
            CodeNotFound: If the code was consumed concurrently
        """
        ...

    def reset_password(self, email: str, otp_id: int, password_hash: str) -> None:
        """
        Consume the forgot code and replace the user's password hash atomically.

        Raises:
            CodeNotFound: If the code was consumed concurrently
        """
        ...

    def list_verified_users(self) -> list[User]:
        """Return verified users, most recent identity first."""
        ...

    def stats(self, now_ms: int) -> AccountStats:
        """Return admin counts; live codes are unused with expires_at > now_ms."""
        ...


class OtpRepository(Protocol):
    """Port interface for one-time code persistence."""

    def replace_code(self, email: str, purpose: OtpPurpose, code: str, expires_at: int) -> None:
        """
        Delete unused codes for (email, purpose) and insert the new one.

        Both statements run in a single transaction so at most one live
        code exists per pair.
        """
        ...

    def latest_unused(self, email: str, purpose: OtpPurpose) -> OtpCode | None:
        """Return the most recently inserted unused code for the pair."""
        ...

    def mark_used(self, otp_id: int) -> bool:
        """
        Flip used from false to true.

        Returns:
            True if this call consumed the code, False if it was already used
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_code(self, email: str, code: str, purpose: OtpPurpose) -> None:
        """
        Deliver a one-time code to an email address.

        Args:
            email: Recipient email address
            code: 6-digit one-time code
            purpose: Selects the subject and wording of the message

        Raises:
            DeliveryFailed: On any transport fault
        """
        ...
