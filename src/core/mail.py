from __future__ import annotations

import asyncio
import html
import logging
from dataclasses import dataclass

import requests

from src.core.config import settings
from src.core.errors import TransientDeliveryFailure

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FollowUpTemplateData:
    client_name: str
    follow_up_url: str
    salon_name: str
    staff_name: str
    appointment_title: str = ""


def render_follow_up_email(data: FollowUpTemplateData) -> str:
    salon = html.escape(data.salon_name)
    return (
        "<html><body>"
        f"<p>Hello {html.escape(data.client_name)},</p>"
        f"<p>Thank you for your visit at {salon} with {html.escape(data.staff_name)}"
        + (f" for <strong>{html.escape(data.appointment_title)}</strong>" if data.appointment_title else "")
        + ".</p>"
        "<p>How is the healing going? Share a photo and tell us how it went:</p>"
        f'<p><a href="{html.escape(data.follow_up_url, quote=True)}">Send my follow-up</a></p>'
        f"<p>See you soon,<br>{salon}</p>"
        "</body></html>"
    )


class MailgunMailer:
    def __init__(
        self,
        *,
        api_key: str | None = None,
        domain: str | None = None,
        base_url: str | None = None,
        from_address: str | None = None,
        timeout_seconds: int | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.mailgun_api_key
        self.domain = domain if domain is not None else settings.mailgun_domain
        self.base_url = (base_url or settings.mailgun_base_url).rstrip("/")
        self.from_address = from_address or settings.mail_from_address
        self.timeout_seconds = timeout_seconds or settings.mail_timeout_seconds

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/v3/{self.domain}/messages"

    async def send_follow_up_email(
        self,
        to_address: str,
        template_data: FollowUpTemplateData,
        sender_display_name: str | None = None,
    ) -> str:
        sender_name = sender_display_name or settings.mail_default_sender_name
        subject = "Your tattoo aftercare follow-up"
        if sender_display_name:
            subject = f"{subject} - {sender_display_name}"
        return await self.send(
            to_address=to_address,
            subject=subject,
            html_body=render_follow_up_email(template_data),
            sender_name=sender_name,
        )

    async def send(self, *, to_address: str, subject: str, html_body: str, sender_name: str) -> str:
        """Send one message and return the provider's message id."""
        if not self.api_key or not self.domain:
            raise TransientDeliveryFailure("Mailgun is not configured")

        payload = {
            "from": f"{sender_name} <{self.from_address}>",
            "to": to_address,
            "subject": subject,
            "html": html_body,
        }

        def _post() -> dict:
            response = requests.post(
                self.messages_url,
                auth=("api", self.api_key),
                data=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return response.json()

        try:
            body = await asyncio.to_thread(_post)
        except requests.RequestException as exc:
            logger.warning("Mailgun send to=%s failed: %s", to_address, exc)
            raise TransientDeliveryFailure(f"Mail delivery failed: {exc}") from exc

        message_id = str(body.get("id", ""))
        logger.info("Mailgun accepted message id=%s to=%s", message_id, to_address)
        return message_id
