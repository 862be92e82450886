"""Pydantic models for emailbot."""

from emailbot.models.analysis import (
    Analysis,
    Classification,
    Eligibility,
    ExtractedData,
    Mention,
)
from emailbot.models.draft import (
    ALL_STATUSES,
    STATUS_APPROVED,
    STATUS_PENDING_REVIEW,
    STATUS_REJECTED,
    STATUS_SENT,
    Approval,
    ClientInfo,
    Draft,
    DraftAnalysis,
    DraftStatus,
    FollowupState,
    SourceRef,
)
from emailbot.models.email import InboundMessage, LeadSummary
from emailbot.models.results import (
    BatchItem,
    BatchResult,
    DueFollowup,
    IngestResult,
    Metrics,
)

__all__ = [
    "Analysis",
    "Classification",
    "Eligibility",
    "ExtractedData",
    "Mention",
    "ALL_STATUSES",
    "STATUS_APPROVED",
    "STATUS_PENDING_REVIEW",
    "STATUS_REJECTED",
    "STATUS_SENT",
    "Approval",
    "ClientInfo",
    "Draft",
    "DraftAnalysis",
    "DraftStatus",
    "FollowupState",
    "SourceRef",
    "InboundMessage",
    "LeadSummary",
    "BatchItem",
    "BatchResult",
    "DueFollowup",
    "IngestResult",
    "Metrics",
]
