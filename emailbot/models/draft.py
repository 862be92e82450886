"""Draft entity: a persisted candidate reply tied to one inbound message/thread."""

from datetime import datetime, timezone
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

DraftStatus = Literal["pending_review", "approved", "rejected", "sent"]

STATUS_PENDING_REVIEW = "pending_review"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
STATUS_SENT = "sent"

ALL_STATUSES: tuple[str, ...] = (
    STATUS_PENDING_REVIEW,
    STATUS_APPROVED,
    STATUS_REJECTED,
    STATUS_SENT,
)

FOLLOWUP_SLOTS = (1, 2, 3)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClientInfo(BaseModel):
    """Lead identity copied at generation time; never re-synced from the source."""

    email: str
    name: Optional[str] = None
    company: Optional[str] = None
    service: Optional[str] = None


class SourceRef(BaseModel):
    """The inbound message that produced the draft. external_id/thread_id are the dedupe keys."""

    external_id: Optional[str] = None
    thread_id: Optional[str] = None
    subject: str = ""
    original_message: str = ""


class DraftAnalysis(BaseModel):
    """Analysis snapshot stored on the draft; refreshed on regeneration."""

    language: Literal["en", "es"] = "en"
    message_type: str = "lead"
    sentiment: str = "neutral"
    urgency: str = "normal"
    sla_bucket: str = "24h"
    recommended_action: str = ""
    priority: Optional[str] = None
    sla_deadline: Optional[datetime] = None
    question_count: int = 0
    budget_mentioned: bool = False
    timeline_mentioned: bool = False
    services: list[str] = []
    agent_insight: Optional[str] = None
    regenerated_at: Optional[datetime] = None
    regenerate_instruction: Optional[str] = None
    followup_number: Optional[int] = None


class Approval(BaseModel):
    """Reviewer decision. approved_at is the decision time for approvals and rejections alike.

    A record holding only editor_notes (approver and approved_at unset) means no decision yet.
    """

    approver: Optional[str] = None
    approved_at: Optional[datetime] = None
    editor_content: Optional[str] = None
    rejection_reason: Optional[str] = None
    editor_notes: Optional[str] = None


class FollowupState(BaseModel):
    """Per-slot sent timestamps (on a parent) and linkage fields (on a follow-up draft)."""

    sent1: Optional[datetime] = None
    sent2: Optional[datetime] = None
    sent3: Optional[datetime] = None
    is_followup: bool = False
    parent_draft_id: Optional[str] = None
    followup_number: Optional[int] = None

    def sent_at(self, number: int) -> Optional[datetime]:
        return getattr(self, f"sent{number}")

    def mark(self, number: int, when: datetime) -> None:
        if number not in FOLLOWUP_SLOTS:
            raise ValueError(f"Follow-up number must be 1, 2 or 3, got {number}")
        setattr(self, f"sent{number}", when)


class Draft(BaseModel):
    """Central entity of the approval workflow. Never deleted; terminal states are kept for audit."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    generated_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    sent_at: Optional[datetime] = None
    client: ClientInfo
    source: SourceRef
    content: str
    analysis: DraftAnalysis = DraftAnalysis()
    status: DraftStatus = STATUS_PENDING_REVIEW
    approval: Optional[Approval] = None
    followups: FollowupState = FollowupState()

    @property
    def is_followup(self) -> bool:
        return self.followups.is_followup

    def touch(self, when: datetime | None = None) -> None:
        self.updated_at = when or utcnow()
