"""Sender: delivers approved drafts through the mailbox and records the send."""

from datetime import datetime
from typing import Optional

from emailbot.approval import ApprovalStateMachine
from emailbot.errors import InvalidRequest, InvalidTransition
from emailbot.followup import FollowupScheduler
from emailbot.mailbox.mime import build_reply
from emailbot.mailbox.protocol import MailboxProvider
from emailbot.models.draft import STATUS_APPROVED, STATUS_SENT, Draft, utcnow
from emailbot.models.results import BatchItem, BatchResult
from emailbot.store.protocol import DraftStore
from emailbot.utils.logger import get_logger
from emailbot.utils.tracing import get_tracer

logger = get_logger("emailbot.sender")


class Sender:
    """Delivery is at-least-once: the mailbox send happens before the sent transition is stored."""

    def __init__(
        self,
        store: DraftStore,
        mailbox: MailboxProvider,
        approvals: ApprovalStateMachine,
        followups: FollowupScheduler,
        from_address: str,
    ):
        self._store = store
        self._mailbox = mailbox
        self._approvals = approvals
        self._followups = followups
        self._from_address = from_address

    def _original_message_id(self, draft: Draft) -> Optional[str]:
        if not draft.source.external_id:
            return None
        original = self._mailbox.get_message(draft.source.external_id)
        return original.header("Message-ID") if original is not None else None

    def send_draft(self, draft_id: str, now: datetime | None = None) -> Draft:
        draft = self._approvals.load(draft_id)
        if draft.status != STATUS_APPROVED:
            raise InvalidTransition(draft.id, draft.status, STATUS_SENT)

        with get_tracer().start_as_current_span("sender.send") as span:
            span.set_attribute("emailbot.draft_id", draft.id)
            raw = build_reply(draft, self._from_address, in_reply_to=self._original_message_id(draft))
            sent = self._mailbox.send_message(raw, thread_id=draft.source.thread_id)

        when = now or utcnow()
        logger.info("sender.sent", draft_id=draft.id, message_id=sent.id, to=draft.client.email)
        updated = self._approvals.mark_sent(draft.id, sent_at=when)
        if updated.is_followup:
            self._followups.mark_sent(updated, sent_at=when)
        return updated

    def send_approved(self, now: datetime | None = None) -> BatchResult:
        """Send every approved draft; one failure never stops the rest."""
        result = BatchResult()
        for draft in self._store.list_by_status(STATUS_APPROVED):
            try:
                sent = self.send_draft(draft.id, now=now)
            except Exception as e:
                logger.error("sender.item_failed", draft_id=draft.id, error=str(e))
                result.record(
                    BatchItem(id=draft.id, status="failed", email=draft.client.email, draft_id=draft.id, error=str(e))
                )
                continue
            result.record(
                BatchItem(
                    id=draft.id,
                    status="succeeded",
                    email=sent.client.email,
                    draft_id=sent.id,
                    detail={"sent_at": sent.sent_at.isoformat() if sent.sent_at else None},
                )
            )
        logger.info("sender.batch_done", succeeded=result.succeeded, failed=result.failed)
        return result

    def send_followup(self, draft_id: str, now: datetime | None = None) -> Draft:
        draft = self._approvals.load(draft_id)
        if not draft.is_followup:
            raise InvalidRequest(f"Draft {draft_id} is not a follow-up")
        return self.send_draft(draft_id, now=now)
