"""Email sender adapters - console (development) and SMTP."""

from .console import ConsoleEmailSender
from .message import RenderedEmail, render_code_email
from .smtp import SmtpEmailSender

__all__ = ["ConsoleEmailSender", "RenderedEmail", "SmtpEmailSender", "render_code_email"]
