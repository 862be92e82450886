"""RFC 2822 reply construction."""

from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Optional

from emailbot.models.draft import Draft


def reply_subject(subject: str) -> str:
    subject = (subject or "").strip()
    if subject.lower().startswith(("re:", "seguimiento:", "follow-up:")):
        return subject
    return f"Re: {subject}" if subject else "Re:"


def build_reply(
    draft: Draft,
    from_address: str,
    in_reply_to: Optional[str] = None,
    references: Optional[str] = None,
) -> str:
    """Plain-text reply to the draft's lead. in_reply_to is the original Message-ID, when known."""
    msg = EmailMessage()
    msg["From"] = from_address
    msg["To"] = draft.client.email
    msg["Subject"] = reply_subject(draft.source.subject)
    msg["Date"] = formatdate(localtime=False, usegmt=True)
    msg["Message-ID"] = make_msgid(domain=from_address.split("@")[-1] if "@" in from_address else None)
    if in_reply_to:
        msg["In-Reply-To"] = in_reply_to
        msg["References"] = references or in_reply_to
    msg.set_content(draft.content)
    return msg.as_string()
