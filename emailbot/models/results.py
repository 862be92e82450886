"""Batch summaries, follow-up reports and metrics."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from emailbot.models.email import LeadSummary


class BatchItem(BaseModel):
    """Outcome for one item of a batch operation."""

    id: str
    status: str  # succeeded | failed | skipped
    email: Optional[str] = None
    draft_id: Optional[str] = None
    error: Optional[str] = None
    detail: dict[str, Any] = {}


class BatchResult(BaseModel):
    """Partial-success summary; batch operations never raise for per-item failures."""

    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    details: list[BatchItem] = []

    def record(self, item: BatchItem) -> None:
        if item.status == "succeeded":
            self.succeeded += 1
        elif item.status == "failed":
            self.failed += 1
        else:
            self.skipped += 1
        self.details.append(item)


class IngestResult(BatchResult):
    """Ingestion summary: batch counters plus one summary per lead that produced (or matched) a draft."""

    leads: list[LeadSummary] = []

    @property
    def count(self) -> int:
        return len(self.leads)


class DueFollowup(BaseModel):
    draft_id: str
    thread_id: Optional[str] = None
    email: str
    number: int
    due_at: datetime


class Metrics(BaseModel):
    counts: dict[str, int]
    total: int
    approval_rate: float
    avg_pending_age_hours: float
    sla_breaches: int
    urgent_pending: int
    approved_today: int
    sent_today: int
    generated_last_7_days: int
