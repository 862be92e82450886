"""Aggregate metrics over the draft set."""

from datetime import datetime, timedelta
from typing import Iterable

from emailbot.models.draft import (
    ALL_STATUSES,
    STATUS_APPROVED,
    STATUS_PENDING_REVIEW,
    STATUS_REJECTED,
    STATUS_SENT,
    Draft,
    utcnow,
)
from emailbot.models.results import Metrics

URGENT_WINDOW = timedelta(hours=1)
RECENT_WINDOW = timedelta(days=7)


def compute_metrics(drafts: Iterable[Draft], now: datetime | None = None) -> Metrics:
    """Counts by status, approval rate (approved+sent over decided, in percent), pending age and SLA state."""
    now = now or utcnow()
    drafts = list(drafts)
    counts = {status: 0 for status in ALL_STATUSES}
    for d in drafts:
        counts[d.status] = counts.get(d.status, 0) + 1

    accepted = counts[STATUS_APPROVED] + counts[STATUS_SENT]
    decided = accepted + counts[STATUS_REJECTED]
    approval_rate = round(accepted / decided * 100, 1) if decided else 0.0

    pending = [d for d in drafts if d.status == STATUS_PENDING_REVIEW]
    if pending:
        total_hours = sum((now - d.generated_at).total_seconds() / 3600 for d in pending)
        avg_pending_age = round(total_hours / len(pending), 1)
    else:
        avg_pending_age = 0.0

    deadlines = [d.analysis.sla_deadline for d in pending if d.analysis.sla_deadline is not None]
    sla_breaches = sum(1 for deadline in deadlines if deadline < now)
    urgent = sum(1 for deadline in deadlines if now <= deadline <= now + URGENT_WINDOW)

    today = now.date()
    approved_today = sum(
        1
        for d in drafts
        if d.approval is not None
        and d.approval.approved_at is not None
        and d.status in (STATUS_APPROVED, STATUS_SENT)
        and d.approval.approved_at.date() == today
    )
    sent_today = sum(1 for d in drafts if d.sent_at is not None and d.sent_at.date() == today)
    recent = sum(1 for d in drafts if now - d.generated_at <= RECENT_WINDOW)

    return Metrics(
        counts=counts,
        total=len(drafts),
        approval_rate=approval_rate,
        avg_pending_age_hours=avg_pending_age,
        sla_breaches=sla_breaches,
        urgent_pending=urgent,
        approved_today=approved_today,
        sent_today=sent_today,
        generated_last_7_days=recent,
    )
