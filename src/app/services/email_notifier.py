"""
Outbound email capability.

Notifications are best effort: callers go through notify_safely so that a
mail failure never fails the operation that triggered it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class EmailMessage(BaseModel):
    to: str
    subject: str
    html: str
    text: Optional[str] = None


class IEmailNotifier(ABC):
    """Email delivery interface - application layer"""

    @abstractmethod
    async def send(self, message: EmailMessage) -> None:
        """Deliver a message. Raises on delivery failure."""
        pass


async def notify_safely(notifier: Optional[IEmailNotifier], message: EmailMessage) -> bool:
    if notifier is None:
        return False
    try:
        await notifier.send(message)
        return True
    except Exception:
        logger.exception(f"Failed to send email '{message.subject}'")
        return False


def password_reset_email(to: str, reset_url: str, name: Optional[str] = None) -> EmailMessage:
    greeting = f"Hi {name}," if name else "Hi,"
    return EmailMessage(
        to=to,
        subject="Reset your password",
        html=(
            f"<p>{greeting}</p><p>Someone requested a password reset for your account.</p>"
            f'<p><a href="{reset_url}">Reset your password</a></p>'
            "<p>The link expires in 1 hour. If you did not ask for this, ignore this email.</p>"
        ),
        text=(
            f"{greeting}\n\nReset your password: {reset_url}\n\n"
            "The link expires in 1 hour. If you did not ask for this, ignore this email."
        ),
    )


def account_created_email(to: str, name: Optional[str] = None) -> EmailMessage:
    greeting = f"Hi {name}," if name else "Hi,"
    return EmailMessage(
        to=to,
        subject="Your account has been created",
        html=f"<p>{greeting}</p><p>Your account is ready. You can now sign in.</p>",
        text=f"{greeting}\n\nYour account is ready. You can now sign in.",
    )


def mfa_enabled_email(to: str, name: Optional[str] = None) -> EmailMessage:
    greeting = f"Hi {name}," if name else "Hi,"
    return EmailMessage(
        to=to,
        subject="Two-factor authentication enabled",
        html=(
            f"<p>{greeting}</p><p>Two-factor authentication is now enabled on your account.</p>"
            "<p>Keep your backup codes somewhere safe.</p>"
        ),
        text=(
            f"{greeting}\n\nTwo-factor authentication is now enabled on your account.\n"
            "Keep your backup codes somewhere safe."
        ),
    )
