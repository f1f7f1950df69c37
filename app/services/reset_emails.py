"""Email bodies for the password-reset flow.

Two messages: the OTP email (request phase) and the confirmation email
(after a successful reset). Both carry a plain-text and an HTML part.
"""

from datetime import UTC, datetime
from html import escape

from app.providers.email.base import EmailMessage

_FOOTER_TEXT = "This is an automated message, please do not reply to this email."


def _html_shell(site_name: str, heading: str, body: str) -> str:
    year = datetime.now(UTC).year
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; '
        'margin: 0 auto; padding: 20px;">'
        f'<h1 style="color: #333;">{escape(site_name)}</h1>'
        f'<h2 style="color: #666; font-weight: normal;">{escape(heading)}</h2>'
        f"{body}"
        '<p style="color: #999; font-size: 12px;">'
        f"{_FOOTER_TEXT}<br>&copy; {year} {escape(site_name)}. All rights reserved."
        "</p></div>"
    )


def build_otp_email(
    *,
    username: str,
    otp: str,
    expires_in_minutes: int,
    site_name: str,
) -> EmailMessage:
    """Render the reset-code email.

    Args:
        username: Account login name, used in the greeting.
        otp: Plain code to deliver.
        expires_in_minutes: Validity window shown to the user.
        site_name: Brand name for subject and header.

    Returns:
        EmailMessage with text and HTML parts.
    """
    text = (
        f"Hello {username},\n\n"
        "You have requested to reset the password for your admin account. "
        "Use the following one-time password to proceed:\n\n"
        f"    {otp}\n\n"
        f"This code is valid for {expires_in_minutes} minutes only. "
        "Do not share it with anyone. If you didn't request this password "
        "reset, you can safely ignore this email.\n\n"
        f"{_FOOTER_TEXT}"
    )
    body = (
        f"<p>Hello <strong>{escape(username)}</strong>,</p>"
        "<p>You have requested to reset the password for your admin account. "
        "Use the following one-time password to proceed:</p>"
        '<p style="font-size: 24px; font-weight: bold; letter-spacing: 3px;">'
        f"{escape(otp)}</p>"
        "<ul>"
        f"<li>This code is valid for {expires_in_minutes} minutes only</li>"
        "<li>Do not share this code with anyone</li>"
        "<li>If you didn't request this password reset, please ignore this email</li>"
        "</ul>"
    )
    return EmailMessage(
        subject=f"{site_name} - Password Reset OTP",
        text=text,
        html=_html_shell(site_name, "Password Reset Request", body),
    )


def build_reset_confirmation_email(*, username: str, site_name: str) -> EmailMessage:
    """Render the password-changed confirmation email.

    Args:
        username: Account login name, used in the greeting.
        site_name: Brand name for subject and header.

    Returns:
        EmailMessage with text and HTML parts.
    """
    text = (
        f"Hello {username},\n\n"
        "Your password has been successfully reset. You can now log in to "
        "your admin account using your new password.\n\n"
        "If you didn't make this change, please contact support immediately.\n\n"
        f"{_FOOTER_TEXT}"
    )
    body = (
        f"<p>Hello <strong>{escape(username)}</strong>,</p>"
        "<p>Your password has been successfully reset. You can now log in to "
        "your admin account using your new password.</p>"
        "<p>If you didn't make this change, please contact support immediately.</p>"
    )
    return EmailMessage(
        subject=f"{site_name} - Password Reset Successful",
        text=text,
        html=_html_shell(site_name, "Password Reset Successful", body),
    )
