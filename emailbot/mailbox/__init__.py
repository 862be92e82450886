"""Mailbox provider protocol, Gmail-shaped models, body extraction and reply building."""

from emailbot.mailbox.body import extract_body
from emailbot.mailbox.mime import build_reply, reply_subject
from emailbot.mailbox.mock import JsonMailboxProvider
from emailbot.mailbox.models import (
    Header,
    MailboxMessage,
    MessageBody,
    MessagePart,
    SentMessage,
    encode_body,
)
from emailbot.mailbox.protocol import MailboxProvider

__all__ = [
    "Header",
    "JsonMailboxProvider",
    "MailboxMessage",
    "MailboxProvider",
    "MessageBody",
    "MessagePart",
    "SentMessage",
    "build_reply",
    "encode_body",
    "extract_body",
    "reply_subject",
]
