"""
One-time passcode service - issuance and validation of type-scoped codes.

Policy:
- One live code per (email, purpose): issuing deletes the pair's unused
  codes before inserting the new one, so superseded codes can't be replayed.
- Codes are single-use: the only mutating outcome of validation is the
  used=False -> used=True flip on success.
- Expired codes are rejected, not deleted; the next issuance clears them.
- A mismatch leaves the code live so the user can retry within its window.

Codes are 6 decimal digits (000000-999999), about 19.9 bits. That is only
adequate behind request rate limiting.
"""

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from .entities import OtpCode
from .ports import OtpPurpose, OtpRepository, OtpResult

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class OtpService:
    """Domain service for minting and checking one-time codes."""

    repository: OtpRepository
    ttl_seconds: int = 600
    clock: Callable[[], int] = field(default=_now_ms)

    def issue(self, email: str, purpose: OtpPurpose) -> str:
        """
        Mint a new code for (email, purpose), superseding any live one.

        Args:
            email: Target email address
            purpose: Registration or password reset

        Returns:
            The 6-digit code as a string (leading zeros preserved)
        """
        code = self._generate_code()
        expires_at = self.clock() + self.ttl_seconds * 1000
        self.repository.replace_code(email, purpose, code, expires_at)
        logger.debug("Issued %s code for %s (expires_at=%d)", purpose.value, email, expires_at)
        return code

    def match(self, email: str, code: str, purpose: OtpPurpose) -> tuple[OtpResult, OtpCode | None]:
        """
        Check a code against the latest unused one for the pair, without consuming it.

        Returns:
            (OtpResult, the stored code row or None when NOT_FOUND)
        """
        otp = self.repository.latest_unused(email, purpose)
        if otp is None:
            return OtpResult.NOT_FOUND, None
        if not secrets.compare_digest(otp.code.encode(), code.encode()):
            return OtpResult.MISMATCH, otp
        if self.clock() > otp.expires_at:
            return OtpResult.EXPIRED, otp
        return OtpResult.SUCCESS, otp

    def validate(self, email: str, code: str, purpose: OtpPurpose) -> OtpResult:
        """
        Check a code and consume it on success.

        A concurrent request that consumed the same row first turns this
        call's SUCCESS into NOT_FOUND.
        """
        result, otp = self.match(email, code, purpose)
        if result is not OtpResult.SUCCESS:
            return result
        if not self.repository.mark_used(otp.id):
            return OtpResult.NOT_FOUND
        return OtpResult.SUCCESS

    def _generate_code(self) -> str:
        """Uniform over 000000-999999; string form keeps leading zeros."""
        return f"{secrets.randbelow(10**CODE_LENGTH):0{CODE_LENGTH}d}"
