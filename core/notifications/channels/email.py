"""SendGrid email delivery channel."""

import json
import os
import re

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from core.notifications.results import Err, Ok, Result


SENDGRID_API_KEY = os.environ.get("SENDGRID_API_KEY")
FROM_EMAIL = os.environ.get("FROM_EMAIL", "workshops@example.com")
FROM_NAME = os.environ.get("FROM_NAME", "Workshop Team")

# Regex to match markdown links: [text](url)
MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

_client: SendGridAPIClient | None = None


def markdown_to_html(text: str) -> str:
    """
    Convert markdown-style links to HTML and wrap in basic HTML structure.

    Converts [text](url) to <a href="url">text</a> and preserves line breaks.
    """
    html_body = MARKDOWN_LINK_PATTERN.sub(r'<a href="\2">\1</a>', text)
    html_body = html_body.replace("\n", "<br>\n")

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body style="font-family: 'Segoe UI', sans-serif; max-width: 600px; margin: 0 auto; line-height: 1.5; color: #333;">
{html_body}
</body>
</html>"""


def markdown_to_plain_text(text: str) -> str:
    """
    Convert markdown-style links to plain text with URL in parentheses.

    Converts [text](url) to text (url) for plain text email fallback.
    """
    return MARKDOWN_LINK_PATTERN.sub(r"\1 (\2)", text)


def _get_sendgrid_client() -> SendGridAPIClient | None:
    """Get or create SendGrid client singleton."""
    global _client
    if _client is None and SENDGRID_API_KEY:
        _client = SendGridAPIClient(SENDGRID_API_KEY)
    return _client


def _embedded_error(body) -> str | None:
    """
    Extract an error message from a response body, if it carries one.

    SendGrid can answer 2xx with {"errors": [{"message": ...}]}.
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str) or not body.strip():
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if not isinstance(data, dict) or not data.get("errors"):
        return None

    first = data["errors"][0]
    if isinstance(first, dict):
        return first.get("message") or str(first)
    return str(first)


def send_email(
    to_email: str,
    subject: str,
    body: str,
) -> Result:
    """
    Send an email via SendGrid.

    The body can contain markdown-style links [text](url) which will be
    converted to HTML links. Both plain text and HTML versions are sent.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        body: Email body (may contain markdown links)

    Returns:
        Ok on accepted delivery, Err(reason) otherwise
    """
    client = _get_sendgrid_client()
    if not client:
        return Err("SendGrid not configured (SENDGRID_API_KEY not set)")

    try:
        message = Mail(
            from_email=(FROM_EMAIL, FROM_NAME),
            to_emails=to_email,
            subject=subject,
            plain_text_content=markdown_to_plain_text(body),
            html_content=markdown_to_html(body),
        )
        response = client.send(message)
    except Exception as e:
        return Err(f"SendGrid error: {e}")

    if response.status_code not in (200, 201, 202):
        return Err(f"SendGrid returned status {response.status_code}")

    error = _embedded_error(getattr(response, "body", None))
    if error:
        return Err(f"SendGrid error: {error}")

    return Ok()
