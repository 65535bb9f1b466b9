"""
Branded HTML wrapper for outgoing newsletters.

Mail clients (Gmail in particular) render table layouts and block-level
images most consistently, so caller-supplied HTML is dropped into a fixed
table skeleton and every `<img>` is forced to `display:block`.
"""

from __future__ import annotations

import html
import re
from datetime import datetime, timezone

ORG_NAME = "LPRES Administration"
ORG_TAGLINE = "Local Planning Research and Statistics"

_IMG_WITH_STYLE = re.compile(r'<img([^>]*)style="([^"]*)"([^>]*)>', re.IGNORECASE)
_IMG_WITHOUT_STYLE = re.compile(r"<img(?![^>]*style=)", re.IGNORECASE)
_INLINE_BLOCK = re.compile(r"display\s*:\s*inline-block;?", re.IGNORECASE)
_VERTICAL_ALIGN = re.compile(r"vertical-align\s*:[^;]*;?", re.IGNORECASE)

_BLOCK_IMG_STYLE = "display:block;margin:15px auto;"
_DEFAULT_IMG_STYLE = "display:block;margin:15px auto;max-width:100%;height:auto;"


def blockify_images(content: str) -> str:
    """
    Force every image onto its own line.
    """

    def _restyle(match: re.Match) -> str:
        before, style, after = match.groups()
        style = _VERTICAL_ALIGN.sub("", _INLINE_BLOCK.sub("", style)).strip()
        return f'<img{before}style="{_BLOCK_IMG_STYLE}{style}"{after}>'

    content = _IMG_WITH_STYLE.sub(_restyle, content)
    return _IMG_WITHOUT_STYLE.sub(f'<img style="{_DEFAULT_IMG_STYLE}"', content)


def _unsubscribe_block(unsubscribe_url: str | None) -> str:
    if not unsubscribe_url:
        return ""
    href = html.escape(unsubscribe_url, quote=True)
    return (
        '<p style="margin:10px 0 0 0;">'
        f'<a href="{href}" style="color:#059669;text-decoration:none;font-size:12px;'
        'font-family:Arial,Helvetica,sans-serif;">Unsubscribe</a> from this mailing list</p>'
    )


def wrap_newsletter(content: str, *, unsubscribe_url: str | None = None, year: int | None = None) -> str:
    body = blockify_images(content)
    year = year or datetime.now(timezone.utc).year
    font = "font-family:Arial,Helvetica,sans-serif;"

    return f"""<!DOCTYPE html>
<html lang="en" xmlns="http://www.w3.org/1999/xhtml">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <meta http-equiv="X-UA-Compatible" content="IE=edge">
  <meta name="x-apple-disable-message-reformatting">
  <title>{ORG_NAME} Newsletter</title>
</head>
<body style="margin:0;padding:0;background-color:#f4f4f4;{font}">
  <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="background-color:#f4f4f4;">
    <tr>
      <td align="center" style="padding:20px 0;">
        <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="600" style="max-width:600px;background-color:#ffffff;margin:0 auto;">
          <tr>
            <td style="background-color:#064e3b;padding:30px 20px;text-align:center;">
              <h1 style="color:#ffffff;margin:0;font-size:28px;font-weight:600;{font}">{ORG_NAME}</h1>
              <p style="color:#d1fae5;margin:10px 0 0 0;font-size:14px;{font}">{ORG_TAGLINE}</p>
            </td>
          </tr>
          <tr>
            <td style="padding:40px 30px;color:#333333;line-height:1.6;font-size:16px;{font}">
              {body}
            </td>
          </tr>
          <tr>
            <td style="background-color:#f9fafb;padding:30px;text-align:center;border-top:1px solid #e5e7eb;">
              <p style="color:#6b7280;font-size:12px;margin:5px 0;{font}">&copy; {year} {ORG_NAME}. All rights reserved.</p>
              <p style="color:#6b7280;font-size:12px;margin:5px 0;{font}">This is an official communication from the {ORG_TAGLINE} Office.</p>
              {_unsubscribe_block(unsubscribe_url)}
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""
