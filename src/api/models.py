"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.

Request fields are optional at this layer: missing or empty values are
reported by the domain as "missing fields" with a flow-specific message
instead of a 422.
"""

from pydantic import BaseModel, Field

from src.domain.entities import AccountStats, User


class SendCodeRequest(BaseModel):
    """Request model for starting a registration."""

    email: str | None = None
    full_name: str | None = None
    phone: str | None = None
    password: str | None = Field(default=None, description="Password (min 6 characters)")
    photo: str | None = None


class VerifyCodeRequest(BaseModel):
    """Request model for completing a registration."""

    email: str | None = None
    code: str | None = Field(default=None, description="6-digit register code")


class EmailRequest(BaseModel):
    """Request model for resend-otp and forgot-password."""

    email: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class ResetPasswordRequest(BaseModel):
    """Request model for setting a new password with a forgot code."""

    email: str | None = None
    code: str | None = Field(default=None, description="6-digit reset code")
    new_password: str | None = Field(default=None, description="New password (min 6 characters)")


class UserResponse(BaseModel):
    """Public view of a user; never includes the password hash."""

    id: int
    full_name: str
    email: str
    phone: str
    photo: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            phone=user.phone,
            photo=user.photo,
        )


class MessageResponse(BaseModel):
    ok: bool = True
    message: str


class AuthResponse(BaseModel):
    """Response model for verify-otp and login."""

    ok: bool = True
    message: str
    user: UserResponse


class ErrorResponse(BaseModel):
    """Standard error response model."""

    ok: bool = False
    error: str


class AdminUser(BaseModel):
    id: int
    full_name: str
    email: str
    phone: str
    verified: bool
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "AdminUser":
        return cls(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            phone=user.phone,
            verified=user.verified,
            created_at=user.created_at,
        )


class AdminUsersResponse(BaseModel):
    ok: bool = True
    total: int
    users: list[AdminUser]


class StatsBody(BaseModel):
    total_verified_users: int
    pending_registrations: int
    active_otp_codes: int
    registered_today: int

    @classmethod
    def from_stats(cls, stats: AccountStats) -> "StatsBody":
        return cls(
            total_verified_users=stats.total_verified_users,
            pending_registrations=stats.pending_registrations,
            active_otp_codes=stats.active_otp_codes,
            registered_today=stats.registered_today,
        )


class StatsResponse(BaseModel):
    ok: bool = True
    stats: StatsBody
