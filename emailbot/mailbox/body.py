"""Body extraction for Gmail-shaped messages.

Order: inline payload body, text/plain part (depth-first through multipart
trees), text/html part stripped to text, then the snippet.
"""

from typing import Optional

from emailbot.mailbox.models import MailboxMessage, MessagePart
from emailbot.utils.body_sanitizer import sanitize_email_body


def _find_part(part: MessagePart, mime_type: str) -> Optional[MessagePart]:
    for child in part.parts:
        if child.mimeType == mime_type and child.body.data:
            return child
        if child.parts:
            found = _find_part(child, mime_type)
            if found is not None:
                return found
    return None


def extract_body(message: MailboxMessage) -> str:
    payload = message.payload
    if payload.body.data:
        content_type = "html" if payload.mimeType == "text/html" else "text"
        return sanitize_email_body(payload.body.decode(), content_type)

    plain = _find_part(payload, "text/plain")
    if plain is not None:
        text = sanitize_email_body(plain.body.decode(), "text")
        if text:
            return text

    rich = _find_part(payload, "text/html")
    if rich is not None:
        text = sanitize_email_body(rich.body.decode(), "html")
        if text:
            return text

    return sanitize_email_body(message.snippet, "text")
