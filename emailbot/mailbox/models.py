"""Pydantic models for the Gmail API message shape (subset we need)."""

import base64
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Header(BaseModel):
    name: str
    value: str


class MessageBody(BaseModel):
    """Gmail MessagePartBody. data is base64url-encoded."""

    size: int = 0
    data: Optional[str] = None

    def decode(self) -> str:
        if not self.data:
            return ""
        padded = self.data + "=" * (-len(self.data) % 4)
        return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


class MessagePart(BaseModel):
    """Gmail MessagePart; multipart payloads nest further parts."""

    model_config = ConfigDict(extra="allow")

    partId: Optional[str] = None
    mimeType: str = "text/plain"
    filename: str = ""
    headers: list[Header] = []
    body: MessageBody = MessageBody()
    parts: list["MessagePart"] = []


class MailboxMessage(BaseModel):
    """Gmail users.messages resource (subset)."""

    model_config = ConfigDict(extra="allow")

    id: str
    threadId: Optional[str] = None
    labelIds: list[str] = []
    snippet: str = ""
    internalDate: Optional[str] = None  # epoch milliseconds, as a string
    payload: MessagePart = MessagePart()

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup on the top-level payload."""
        wanted = name.lower()
        for h in self.payload.headers:
            if h.name.lower() == wanted:
                return h.value
        return None

    @property
    def subject(self) -> str:
        return self.header("Subject") or ""

    @property
    def received_at(self) -> Optional[datetime]:
        if not self.internalDate:
            return None
        try:
            return datetime.fromtimestamp(int(self.internalDate) / 1000, tz=timezone.utc)
        except ValueError:
            return None


class SentMessage(BaseModel):
    id: str
    threadId: Optional[str] = None
    labelIds: list[str] = []


def encode_body(text: str) -> str:
    """base64url-encode text the way Gmail stores part bodies."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")
