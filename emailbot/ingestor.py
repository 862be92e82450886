"""Ingestion: turn mailbox messages into normalized InboundMessage leads."""

import re
from datetime import datetime, timezone
from email.utils import parseaddr
from typing import Iterable, Optional

from emailbot.errors import MalformedSource
from emailbot.mailbox.body import extract_body
from emailbot.mailbox.models import MailboxMessage
from emailbot.models.email import InboundMessage

_EMAIL = re.compile(r"[^@\s<>\"']+@[^@\s<>\"']+\.[^@\s<>\"']+")

# Contact-form fields; the body's Email: wins over the From header (forms send from a no-reply address)
_FORM_PATTERNS = {
    "email": re.compile(r"^\s*Email:\s*([^\n\r]+)", re.I | re.M),
    "name": re.compile(r"^\s*Name:\s*([^\n\r]+)", re.I | re.M),
    "company": re.compile(r"^\s*Company:\s*([^\n\r]+)", re.I | re.M),
    "service": re.compile(r"^\s*(?:Service|Interested in):\s*([^\n\r]+)", re.I | re.M),
    "phone": re.compile(r"^\s*Phone:\s*([^\n\r]+)", re.I | re.M),
    "message": re.compile(r"^\s*Message:\s*([\s\S]*?)(?=\n\s*\n|\n--|\Z)", re.I | re.M),
}


def parse_sender(from_header: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Return (display name, address) from a From header; either may be None."""
    if not from_header:
        return None, None
    name, address = parseaddr(from_header)
    address = address.strip() if address and "@" in address else None
    if address is None:
        match = _EMAIL.search(from_header)
        address = match.group(0) if match else None
    return (name.strip() or None), address


def parse_lead_form(body: str, from_header: Optional[str]) -> dict[str, Optional[str]]:
    """Lead fields from the From header, overridden by contact-form lines in the body."""
    name, email = parse_sender(from_header)
    result: dict[str, Optional[str]] = {
        "email": email,
        "name": name,
        "company": None,
        "service": None,
        "phone": None,
        "message": None,
    }
    for field, pattern in _FORM_PATTERNS.items():
        match = pattern.search(body or "")
        if match and match.group(1).strip():
            result[field] = match.group(1).strip()
    if result["email"]:
        found = _EMAIL.search(result["email"])
        result["email"] = found.group(0) if found else None
    if not result["message"]:
        result["message"] = (body or "").strip()
    return result


def is_auto_response(message: MailboxMessage) -> bool:
    auto_submitted = (message.header("Auto-Submitted") or "").strip().lower()
    if auto_submitted and auto_submitted != "no":
        return True
    if message.header("X-Autoreply") or message.header("X-Autorespond"):
        return True
    return (message.header("Precedence") or "").strip().lower() == "auto_reply"


def latest_in_threads(messages: Iterable[MailboxMessage]) -> set[str]:
    """Ids of the newest message per thread among the given messages."""
    latest: dict[str, MailboxMessage] = {}
    for m in messages:
        key = m.threadId or m.id
        current = latest.get(key)
        if current is None or int(m.internalDate or 0) >= int(current.internalDate or 0):
            latest[key] = m
    return {m.id for m in latest.values()}


def normalize_message(
    message: MailboxMessage,
    processed_ids: Iterable[str] = (),
    latest_ids: Optional[set[str]] = None,
) -> InboundMessage:
    """Normalize one mailbox message. Raises MalformedSource when no sender address resolves."""
    from_header = message.header("From") or ""
    body = extract_body(message)
    lead = parse_lead_form(body, from_header)
    if not lead["email"]:
        raise MalformedSource(message.id)
    return InboundMessage(
        external_id=message.id,
        thread_id=message.threadId,
        subject=message.subject,
        from_header=from_header,
        sender_email=lead["email"],
        sender_name=lead["name"],
        company=lead["company"],
        service=lead["service"],
        phone=lead["phone"],
        body=body,
        message=lead["message"] or "",
        received_at=message.received_at or datetime.now(timezone.utc),
        already_processed=message.id in set(processed_ids),
        is_latest=latest_ids is None or message.id in latest_ids,
        auto_response=is_auto_response(message),
    )
