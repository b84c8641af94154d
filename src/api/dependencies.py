"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.

The store and email sender are created during app lifespan startup and
kept in app.state, so tests can swap either without touching settings.
"""

import secrets

from fastapi import Depends, Header, Request

from src.adapters.repository.sqlite import SqliteAccountRepository, SqliteOtpRepository
from src.adapters.repository.store import SqliteStore
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.smtp import SmtpEmailSender
from src.config.settings import Settings, get_settings
from src.domain.admin import AdminService
from src.domain.exceptions import Unauthorized
from src.domain.otp import OtpService
from src.domain.ports import EmailSender
from src.domain.registration import RegistrationService


def build_email_sender(settings: Settings) -> EmailSender:
    """Choose the email backend from settings."""
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            host=settings.mail_host,
            port=settings.mail_port,
            username=settings.mail_user,
            password=settings.mail_password,
            sender=settings.mail_from,
            use_tls=settings.mail_use_tls,
            timeout=settings.mail_timeout_seconds,
            ttl_minutes=max(1, settings.otp_ttl_seconds // 60),
        )
    return ConsoleEmailSender()


def get_store(request: Request) -> SqliteStore:
    """
    Get the store from app state.

    The store is opened during app lifespan startup and stored in app.state.
    """
    return request.app.state.store


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


def get_account_repository(request: Request) -> SqliteAccountRepository:
    return SqliteAccountRepository(get_store(request))


def get_otp_service(
    request: Request, settings: Settings = Depends(get_settings)
) -> OtpService:
    return OtpService(
        repository=SqliteOtpRepository(get_store(request)),
        ttl_seconds=settings.otp_ttl_seconds,
    )


def get_registration_service(
    request: Request,
    settings: Settings = Depends(get_settings),
    otp_service: OtpService = Depends(get_otp_service),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repositories, OTP service and email sender.
    """
    return RegistrationService(
        accounts=get_account_repository(request),
        otp_service=otp_service,
        email_sender=get_email_sender(request),
        bcrypt_cost=settings.bcrypt_cost,
        min_password_length=settings.min_password_length,
    )


def get_admin_service(request: Request) -> AdminService:
    return AdminService(accounts=get_account_repository(request))


def require_admin_key(
    x_admin_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Gate admin routes on the X-Admin-Key header.

    Byte-for-byte comparison in constant time. A missing header, or an
    unconfigured (empty) admin key, always fails.

    Raises:
        Unauthorized: On any mismatch
    """
    expected = settings.admin_key
    if not expected or x_admin_key is None:
        raise Unauthorized()
    if not secrets.compare_digest(x_admin_key.encode(), expected.encode()):
        raise Unauthorized()
