"""Normalized inbound message (lead) model."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class InboundMessage(BaseModel):
    """One inbound email, normalized from the mailbox payload and parsed for lead fields."""

    external_id: str
    thread_id: Optional[str] = None
    subject: str = ""
    from_header: str = ""
    sender_email: str
    sender_name: Optional[str] = None
    company: Optional[str] = None
    service: Optional[str] = None
    phone: Optional[str] = None
    body: str = ""
    message: str = ""  # lead message text (form "Message:" field, else the body)
    received_at: datetime
    already_processed: bool = False
    is_latest: bool = True
    auto_response: bool = False


class LeadSummary(BaseModel):
    """Per-lead line in an ingestion result."""

    external_id: str
    thread_id: Optional[str] = None
    email: str
    company: Optional[str] = None
    message_type: Optional[str] = None
    draft_id: Optional[str] = None
    deduped: bool = False
