"""
Request admission limits (per client address).

Code-sending endpoints are the tightest: each call can trigger an email.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

OTP_SEND_LIMIT = "3/minute"
LOGIN_LIMIT = "10 per 15 minutes"
DEFAULT_LIMIT = "100 per 15 minutes"

# Global limiter instance reused across the app
limiter = Limiter(key_func=get_remote_address, default_limits=[DEFAULT_LIMIT])
