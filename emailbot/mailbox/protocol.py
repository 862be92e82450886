"""Mailbox provider protocol (Gmail-like interface)."""

from typing import Optional, Protocol

from emailbot.mailbox.models import MailboxMessage, SentMessage


class MailboxProvider(Protocol):
    """Fetch and send mail. Listing or authentication failures propagate and abort a batch."""

    def list_messages(self, query: str, limit: int) -> list[str]:
        """Return up to limit message ids matching a Gmail-style query, newest first."""
        ...

    def get_message(self, message_id: str) -> Optional[MailboxMessage]:
        ...

    def send_message(self, raw: str, thread_id: Optional[str] = None) -> SentMessage:
        """Send a raw RFC 2822 message, threaded onto thread_id when given."""
        ...
