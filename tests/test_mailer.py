"""
Tests for the SMTP mailer that do not open a connection.
"""

from __future__ import annotations

import pytest

from core.config import EmailSettings
from core.errors import EmailServiceError
from newsletter import mailer as mailer_module
from newsletter.mailer import Mailer, PreparedContent, prepare_content, strip_html

from fakes import FakeMailer


def test_implicit_tls_disables_starttls():
    kwargs = Mailer(EmailSettings(port=465, secure=True, user="u", password="p"))._smtp_kwargs()

    assert kwargs["use_tls"] is True
    assert kwargs["start_tls"] is False


def test_plain_port_leaves_starttls_to_the_server():
    kwargs = Mailer(EmailSettings(port=587, secure=False, user="u", password="p"))._smtp_kwargs()

    assert kwargs["use_tls"] is False
    assert kwargs["start_tls"] is None


def test_message_has_text_and_html_parts():
    mailer = Mailer(EmailSettings(user="news@example.com", password="p", from_name="LPRES Administration"))
    content = PreparedContent(html="<p>Hi <b>there</b></p>", text="Hi there")

    msg = mailer.build_message(to="reader@example.com", subject="Hello", content=content)

    assert msg["From"] == "LPRES Administration <news@example.com>"
    assert msg["Subject"] == "Hello"
    assert msg.get_body(("plain",)).get_content().strip() == "Hi there"
    assert "there" in msg.get_body(("html",)).get_content()


@pytest.mark.asyncio
async def test_prepare_content_inlines_css_and_derives_text():
    content = await prepare_content("<style>p { color: red; }</style><p>Hi <b>there</b></p>")

    assert 'style="color:red"' in content.html.replace(" ", "")
    assert content.text == "Hi there"


@pytest.mark.asyncio
async def test_send_bulk_inlines_css_once(monkeypatch):
    calls = []

    def counting_inline_css(html):
        calls.append(html)
        return html

    monkeypatch.setattr(mailer_module, "inline_css", counting_inline_css)
    mailer = FakeMailer()

    result = await mailer.send_bulk(
        ["a@example.com", "b@example.com", "c@example.com"],
        subject="Issue 1",
        html="<p>x</p>",
        batch_size=2,
        delay_s=0,
    )

    assert result.success == 3
    assert calls == ["<p>x</p>"]


def test_strip_html_drops_style_blocks():
    assert strip_html("<style>p{color:red}</style><p>One</p>\n<p>Two</p>") == "One Two"


@pytest.mark.asyncio
async def test_unconfigured_mailer_does_not_verify_or_send():
    mailer = Mailer(EmailSettings())

    assert mailer.is_configured is False
    assert await mailer.verify() is False
    with pytest.raises(EmailServiceError):
        await mailer.send(to="reader@example.com", subject="x", html="<p>x</p>")


@pytest.mark.asyncio
async def test_send_bulk_batches_and_tallies():
    mailer = FakeMailer(failing=("b@example.com",))

    result = await mailer.send_bulk(
        ["a@example.com", "b@example.com", "c@example.com"],
        subject="Issue 1",
        html="<p>x</p>",
        batch_size=2,
        delay_s=0,
    )

    assert (result.success, result.failed) == (2, 1)
    assert result.errors == ["Failed to send to b@example.com: mailbox unavailable: b@example.com"]
    assert [m["to"] for m in mailer.sent] == ["a@example.com", "c@example.com"]
