"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging one-time codes for development use.
"""

import logging

from src.domain.ports import OtpPurpose

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Never fails, so delivery errors can't be exercised with it.
    """

    def send_code(self, email: str, code: str, purpose: OtpPurpose) -> None:
        """
        Log the code at INFO level (simulates email delivery).

        Args:
            email: Recipient email address
            code: 6-digit one-time code
            purpose: REGISTER or FORGOT
        """
        logger.info("[OTP] Email: %s Code: %s Purpose: %s", email, code, purpose.value)
