"""
Code email rendering.

Wording and subject depend on the code's purpose; layout is shared.
"""

from dataclasses import dataclass
from html import escape

from src.domain.ports import OtpPurpose

PRODUCT_NAME = "otpgate"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    text: str
    html: str


_COPY = {
    OtpPurpose.REGISTER: {
        "subject": f"{PRODUCT_NAME} email verification",
        "title": "Verify your email address",
        "body": f"Welcome to {PRODUCT_NAME}! Enter this code to activate your account:",
    },
    OtpPurpose.FORGOT: {
        "subject": f"{PRODUCT_NAME} password reset code",
        "title": "Reset your password",
        "body": "You asked to reset your password. Use the code below:",
    },
}

_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<body style="margin:0;padding:0;background:#0F0E0D;font-family:Arial,sans-serif;">
<table width="100%" cellpadding="0" cellspacing="0" style="padding:40px 20px;">
  <tr><td align="center">
    <table width="420" cellpadding="0" cellspacing="0"
           style="background:#1C1A18;border-radius:20px;overflow:hidden;">
      <tr>
        <td style="background:#FF5C1A;padding:32px;text-align:center;">
          <h1 style="margin:0;color:#0F0E0D;font-size:28px;">{product}</h1>
          <p style="margin:6px 0 0;color:#0F0E0D;font-size:14px;">{title}</p>
        </td>
      </tr>
      <tr>
        <td style="padding:36px 32px;">
          <p style="color:#9A9286;font-size:15px;margin:0 0 20px;">{body}</p>
          <div style="text-align:center;background:#242220;border-radius:16px;padding:28px;">
            <span style="font-size:42px;font-weight:800;letter-spacing:12px;color:#FF5C1A;
                         font-family:monospace;">{code}</span>
          </div>
          <p style="color:#9A9286;font-size:13px;text-align:center;margin:28px 0 0;">
            This code is valid for <strong>{ttl_minutes} minutes</strong>.
          </p>
        </td>
      </tr>
    </table>
  </td></tr>
</table>
</body>
</html>"""


def render_code_email(code: str, purpose: OtpPurpose, ttl_minutes: int = 10) -> RenderedEmail:
    """
    Render subject, plain-text and HTML bodies for a one-time code.

    Args:
        code: 6-digit code
        purpose: REGISTER or FORGOT; selects subject, title and greeting
        ttl_minutes: Validity window shown to the recipient
    """
    copy = _COPY[purpose]
    text = (
        f"{copy['title']}\n\n"
        f"{copy['body']}\n\n"
        f"    {code}\n\n"
        f"This code is valid for {ttl_minutes} minutes.\n"
    )
    html = _HTML_TEMPLATE.format(
        product=escape(PRODUCT_NAME),
        title=escape(copy["title"]),
        body=escape(copy["body"]),
        code=escape(code),
        ttl_minutes=ttl_minutes,
    )
    return RenderedEmail(subject=copy["subject"], text=text, html=html)
