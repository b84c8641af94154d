"""
Domain entities - Records owned by the account store.

Plain dataclasses; adapters build them from storage rows and the API layer
projects them into response models.
"""

from dataclasses import dataclass

from .ports import OtpPurpose


@dataclass(frozen=True)
class User:
    """A verified account. At most one per email."""

    id: int
    full_name: str
    email: str
    phone: str
    password_hash: str
    photo: str | None
    verified: bool
    created_at: str


@dataclass(frozen=True)
class PendingUser:
    """A staged registration awaiting its register code, keyed by email."""

    email: str
    full_name: str
    phone: str
    password_hash: str
    photo: str | None
    created_at: str


@dataclass(frozen=True)
class OtpCode:
    """
    A single challenge instance.

    expires_at is an absolute instant in epoch milliseconds.
    """

    id: int
    email: str
    code: str
    purpose: OtpPurpose
    expires_at: int
    used: bool


@dataclass(frozen=True)
class AccountStats:
    """Aggregate counts for the admin dashboard."""

    total_verified_users: int
    pending_registrations: int
    active_otp_codes: int
    registered_today: int
