# app/services/mailer.py
from typing import Optional, Protocol

import httpx

from app.core.config import Settings
from app.core.logging import logger
from app.schemas.email import OutboundEmail


class MailerError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class EmailSender(Protocol):
    async def send(self, email: OutboundEmail) -> dict:
        ...


class ResendMailer:
    """Client minimal de l'API Resend (POST /emails)."""

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResendMailer":
        return cls(
            api_key=settings.RESEND_API_KEY,
            api_url=settings.RESEND_API_URL,
            timeout=settings.MAIL_TIMEOUT_SECONDS,
        )

    async def send(self, email: OutboundEmail) -> dict:
        headers = {
            "Authorization": f"Bearer {self.api_key or ''}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=email.to_provider(), headers=headers)
        except httpx.HTTPError as e:
            raise MailerError(f"Resend request failed: {e}") from e

        if response.status_code >= 400:
            raise MailerError(
                f"Resend returned HTTP {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
                body=response.text,
            )

        data = response.json() if response.content else {}
        logger.info("Email sent", provider_id=data.get("id"), subject=email.subject)
        return data
