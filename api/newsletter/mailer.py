"""
Outbound mail over SMTP (aiosmtplib).

One `Mailer` is created in the app lifespan. It holds no open connection:
each message gets its own SMTP session, so concurrent sends are independent.

Bulk sends go out in fixed-size batches. Messages inside a batch are sent
concurrently, batches are separated by a fixed delay to stay under provider
rate limits, and a failed recipient is recorded and skipped (no retries).
CSS inlining and the plain-text part are prepared once per send, in a worker
thread, and shared by every recipient.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

import aiosmtplib
import premailer
from fastapi import Request

from core.config import EmailSettings
from core.errors import EmailServiceError

logger = logging.getLogger(__name__)

MAX_RECORDED_ERRORS = 100

_TAG = re.compile(r"<[^>]*>")
_STYLE_BLOCK = re.compile(r"<(style|script)[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_SPACE = re.compile(r"\s+")


@dataclass
class BulkResult:
    success: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def record_failure(self, recipient: str, exc: BaseException) -> None:
        self.failed += 1
        if len(self.errors) < MAX_RECORDED_ERRORS:
            self.errors.append(f"Failed to send to {recipient}: {exc}")


def strip_html(html: str) -> str:
    return _SPACE.sub(" ", _TAG.sub("", _STYLE_BLOCK.sub("", html))).strip()


def inline_css(html: str) -> str:
    try:
        return premailer.Premailer(
            html,
            remove_classes=False,
            keep_style_tags=True,
            strip_important=False,
            disable_validation=True,
        ).transform()
    except Exception as exc:
        # An un-inlined message still renders in most clients.
        logger.warning("css_inline_failed error=%s", exc)
        return html


@dataclass(frozen=True)
class PreparedContent:
    """HTML with inlined CSS plus its plain-text alternative."""

    html: str
    text: str


async def prepare_content(html: str, text: str | None = None) -> PreparedContent:
    # premailer is CPU bound, keep it off the event loop.
    inlined = await asyncio.to_thread(inline_css, html)
    return PreparedContent(html=inlined, text=text or strip_html(html))


class Mailer:
    def __init__(self, settings: EmailSettings) -> None:
        self.settings = settings

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.user and self.settings.password)

    def _smtp_kwargs(self) -> dict:
        s = self.settings
        return {
            "hostname": s.host,
            "port": s.port,
            "username": s.user,
            "password": s.password,
            "use_tls": s.secure,
            # Implicit TLS and STARTTLS are mutually exclusive.
            "start_tls": False if s.secure else None,
            "timeout": s.timeout_s,
        }

    def _require_configured(self) -> None:
        if not self.is_configured:
            raise EmailServiceError(
                "Email service not configured. Please set EMAIL_USER and EMAIL_PASSWORD in your environment variables."
            )

    async def verify(self) -> bool:
        """
        Open and close one authenticated session. Never raises.
        """
        if not self.is_configured:
            logger.warning("email_not_configured EMAIL_USER/EMAIL_PASSWORD missing")
            return False
        smtp = aiosmtplib.SMTP(**self._smtp_kwargs())
        try:
            await smtp.connect()
            await smtp.quit()
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("email_verify_failed host=%s port=%s error=%s", self.settings.host, self.settings.port, exc)
            return False
        return True

    def build_message(self, *, to: str, subject: str, content: PreparedContent) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self.settings.from_name, self.settings.from_address or self.settings.user))
        msg["To"] = to
        msg["Subject"] = subject
        msg["Message-ID"] = make_msgid()
        msg.set_content(content.text)
        msg.add_alternative(content.html, subtype="html")
        return msg

    async def deliver(self, *, to: str, subject: str, content: PreparedContent) -> None:
        self._require_configured()
        msg = self.build_message(to=to, subject=subject, content=content)
        await aiosmtplib.send(msg, **self._smtp_kwargs())
        logger.info("email_sent to=%s message_id=%s", to, msg["Message-ID"])

    async def send(self, *, to: str, subject: str, html: str, text: str | None = None) -> None:
        self._require_configured()
        await self.deliver(to=to, subject=subject, content=await prepare_content(html, text))

    async def send_bulk(
        self,
        recipients: list[str],
        *,
        subject: str,
        html: str,
        batch_size: int = 50,
        delay_s: float = 1.0,
    ) -> BulkResult:
        result = BulkResult()
        batch_size = max(1, batch_size)
        content = await prepare_content(html)

        for start in range(0, len(recipients), batch_size):
            batch = recipients[start : start + batch_size]
            outcomes = await asyncio.gather(
                *(self.deliver(to=email, subject=subject, content=content) for email in batch),
                return_exceptions=True,
            )
            for email, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    logger.warning("email_send_failed to=%s error=%s", email, outcome)
                    result.record_failure(email, outcome)
                else:
                    result.success += 1

            if start + batch_size < len(recipients) and delay_s > 0:
                await asyncio.sleep(delay_s)

        logger.info(
            "bulk_send_complete recipients=%s success=%s failed=%s",
            len(recipients),
            result.success,
            result.failed,
        )
        return result


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer
