"""
Email delivery adapters

console: logs the message (development and tests)
resend: posts to the Resend HTTP API
"""

import logging
from typing import Optional

import httpx

from src.app.services.email_notifier import EmailMessage, IEmailNotifier

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class ConsoleEmailNotifier(IEmailNotifier):
    """Writes outgoing mail to the log instead of sending it"""

    def __init__(self, sender: str):
        self.sender = sender

    async def send(self, message: EmailMessage) -> None:
        logger.info(
            f"Email from={self.sender} to={message.to} subject={message.subject!r}\n"
            f"{message.text or message.html}"
        )


class ResendEmailNotifier(IEmailNotifier):
    def __init__(self, api_key: str, sender: str, timeout: float = 10.0):
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    async def send(self, message: EmailMessage) -> None:
        payload = {
            "from": self.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.text:
            payload["text"] = message.text

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                RESEND_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
        logger.info(f"Email sent to {message.to} via Resend")


def build_email_notifier(
    provider: str, sender: str, resend_api_key: Optional[str] = None
) -> IEmailNotifier:
    """Notifier for the configured EMAIL_PROVIDER"""
    if provider == "resend":
        if not resend_api_key:
            raise ValueError("RESEND_API_KEY is required when EMAIL_PROVIDER is resend")
        return ResendEmailNotifier(resend_api_key, sender)
    if provider != "console":
        raise ValueError(f"Unknown email provider: {provider}")
    return ConsoleEmailNotifier(sender)
