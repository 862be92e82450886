"""Approval State Machine: the single authority for Draft.status.

pending_review -> approved | rejected
approved       -> sent
rejected       -> (terminal; edit re-opens it to pending_review)
sent           -> (terminal)

Every operation is a read-modify-write of one record through the store,
followed by a best-effort CRM mirror. There is no locking: concurrent
decisions on the same draft are last-writer-wins.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from emailbot.errors import DraftNotFound, InvalidRequest, InvalidTransition
from emailbot.models.draft import (
    STATUS_APPROVED,
    STATUS_PENDING_REVIEW,
    STATUS_REJECTED,
    STATUS_SENT,
    Approval,
    Draft,
    utcnow,
)
from emailbot.store.protocol import DraftStore
from emailbot.utils.logger import get_logger, log_step

if TYPE_CHECKING:
    from emailbot.crm.bridge import SyncBridge

logger = get_logger("emailbot.approval")

TRANSITIONS: dict[str, frozenset[str]] = {
    STATUS_PENDING_REVIEW: frozenset({STATUS_APPROVED, STATUS_REJECTED}),
    STATUS_APPROVED: frozenset({STATUS_SENT}),
    STATUS_REJECTED: frozenset(),
    STATUS_SENT: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


class ApprovalStateMachine:
    def __init__(
        self,
        store: DraftStore,
        sync: Optional["SyncBridge"] = None,
        default_approver: str = "reviewer",
    ):
        self._store = store
        self._sync = sync
        self._default_approver = default_approver

    def load(self, draft_id: str) -> Draft:
        draft = self._store.get_by_id(draft_id)
        if draft is None:
            raise DraftNotFound(draft_id)
        return draft

    def _require(self, draft: Draft, target: str) -> None:
        if not can_transition(draft.status, target):
            logger.warning(
                "approval.invalid_transition",
                draft_id=draft.id,
                current=draft.status,
                target=target,
            )
            raise InvalidTransition(draft.id, draft.status, target)

    def _save(self, draft: Draft, step: str) -> Draft:
        self._store.upsert(draft)
        log_step("approval", step, {"draft_id": draft.id, "status": draft.status})
        if self._sync is not None:
            self._sync.mirror(draft)
        return draft

    def approve(
        self,
        draft_id: str,
        editor_content: Optional[str] = None,
        approver: Optional[str] = None,
        now: datetime | None = None,
    ) -> Draft:
        """Approve a pending draft. editor_content, when given, replaces content and is kept for audit."""
        draft = self.load(draft_id)
        self._require(draft, STATUS_APPROVED)
        when = now or utcnow()
        if editor_content is not None and editor_content.strip():
            draft.content = editor_content
        else:
            editor_content = None
        draft.status = STATUS_APPROVED
        draft.approval = Approval(
            approver=approver or self._default_approver,
            approved_at=when,
            editor_content=editor_content,
        )
        draft.touch(when)
        return self._save(draft, "draft_approved")

    def reject(
        self,
        draft_id: str,
        reason: Optional[str],
        approver: Optional[str] = None,
        now: datetime | None = None,
    ) -> Draft:
        if not reason or not reason.strip():
            raise InvalidRequest("A rejection reason is required")
        draft = self.load(draft_id)
        self._require(draft, STATUS_REJECTED)
        when = now or utcnow()
        draft.status = STATUS_REJECTED
        draft.approval = Approval(
            approver=approver or self._default_approver,
            approved_at=when,
            rejection_reason=reason.strip(),
        )
        draft.touch(when)
        return self._save(draft, "draft_rejected")

    def edit(
        self,
        draft_id: str,
        content: str,
        editor_notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> Draft:
        """Replace content and send the draft back to pending_review. Sent drafts cannot be edited."""
        if content is None or not content.strip():
            raise InvalidRequest("Edited content must not be empty")
        draft = self.load(draft_id)
        if draft.status == STATUS_SENT:
            raise InvalidTransition(draft.id, draft.status, STATUS_PENDING_REVIEW)
        when = now or utcnow()
        previous = draft.status
        draft.content = content
        draft.status = STATUS_PENDING_REVIEW
        if editor_notes:
            if draft.approval is None:
                draft.approval = Approval()
            draft.approval.editor_notes = editor_notes
        draft.touch(when)
        logger.info("approval.edited", draft_id=draft.id, previous_status=previous)
        return self._save(draft, "draft_edited")

    def mark_sent(self, draft_id: str, sent_at: datetime | None = None) -> Draft:
        draft = self.load(draft_id)
        self._require(draft, STATUS_SENT)
        when = sent_at or utcnow()
        draft.status = STATUS_SENT
        draft.sent_at = when
        draft.touch(when)
        return self._save(draft, "draft_sent")

    def reset_after_regeneration(self, draft: Draft, now: datetime | None = None) -> Draft:
        """Persist regenerated content and put the draft back in pending_review."""
        current = self.load(draft.id)
        if current.status == STATUS_SENT:
            raise InvalidTransition(draft.id, current.status, STATUS_PENDING_REVIEW)
        draft.status = STATUS_PENDING_REVIEW
        draft.touch(now)
        return self._save(draft, "draft_regenerated")
