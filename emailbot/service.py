"""EmailBot facade: the operations exposed to callers (CLI or any other surface)."""

from datetime import datetime
from typing import Optional

from emailbot.analyzer import analyze
from emailbot.context import AppContext
from emailbot.errors import DraftNotFound, GenerationFailure, InvalidRequest, MalformedSource
from emailbot.ingestor import latest_in_threads, normalize_message
from emailbot.mailbox.models import MailboxMessage
from emailbot.metrics import compute_metrics
from emailbot.models.draft import ALL_STATUSES, Draft
from emailbot.models.email import LeadSummary
from emailbot.models.results import BatchItem, BatchResult, DueFollowup, IngestResult, Metrics
from emailbot.utils.logger import get_logger, log_context
from emailbot.utils.tracing import get_tracer

logger = get_logger("emailbot.service")


class EmailBot:
    """Every mutating call returns the updated Draft or raises DraftNotFound / InvalidTransition."""

    def __init__(self, context: AppContext):
        self.context = context
        self._store = context.store
        self._mailbox = context.mailbox

    # Ingestion

    def ingest(self, query: Optional[str] = None, limit: Optional[int] = None) -> IngestResult:
        """Fetch matching messages and draft replies for eligible new leads.

        Idempotent per (external_id, thread_id): a message that already has a
        draft is reported as deduped. Per-message problems are recorded in the
        result; mailbox listing or store failures propagate.
        """
        query = query if query is not None else self.context.settings.ingest_query
        limit = limit or self.context.settings.ingest_limit
        result = IngestResult()

        with get_tracer().start_as_current_span("service.ingest") as span:
            span.set_attribute("emailbot.query", query)
            ids = self._mailbox.list_messages(query, limit)
            messages = []
            for message_id in ids:
                message = self._mailbox.get_message(message_id)
                if message is None:
                    logger.warning("ingest.message_missing", external_id=message_id)
                    result.record(BatchItem(id=message_id, status="failed", error="message not found"))
                    continue
                messages.append(message)
            latest_ids = latest_in_threads(messages)

            for message in messages:
                with log_context(external_id=message.id):
                    self._ingest_one(message, latest_ids, result)
            span.set_attribute("emailbot.leads", result.count)

        logger.info(
            "ingest.done",
            leads=result.count,
            succeeded=result.succeeded,
            failed=result.failed,
            skipped=result.skipped,
        )
        return result

    def _ingest_one(self, message: MailboxMessage, latest_ids: set[str], result: IngestResult) -> None:
        existing = self._store.find_by_source(message.id, message.threadId)
        if existing is not None:
            logger.info("ingest.deduped", draft_id=existing.id)
            result.leads.append(
                LeadSummary(
                    external_id=message.id,
                    thread_id=message.threadId,
                    email=existing.client.email,
                    company=existing.client.company,
                    message_type=existing.analysis.message_type,
                    draft_id=existing.id,
                    deduped=True,
                )
            )
            result.record(
                BatchItem(
                    id=message.id,
                    status="skipped",
                    email=existing.client.email,
                    draft_id=existing.id,
                    detail={"reason": "already_processed"},
                )
            )
            return

        try:
            inbound = normalize_message(message, latest_ids=latest_ids)
        except MalformedSource as e:
            logger.warning("ingest.malformed_source", reason=e.reason)
            result.record(BatchItem(id=message.id, status="skipped", error=str(e), detail={"reason": "malformed_source"}))
            return

        analysis = analyze(inbound)
        if not analysis.eligibility.eligible:
            logger.info("ingest.ineligible", issues=analysis.eligibility.issues)
            result.record(
                BatchItem(
                    id=message.id,
                    status="skipped",
                    email=inbound.sender_email,
                    detail={"reason": "ineligible", "issues": analysis.eligibility.issues},
                )
            )
            return

        try:
            draft = self.context.drafter.generate(analysis)
        except GenerationFailure as e:
            logger.error("ingest.generation_failed", error=str(e))
            result.record(BatchItem(id=message.id, status="failed", email=inbound.sender_email, error=str(e)))
            return

        result.leads.append(
            LeadSummary(
                external_id=message.id,
                thread_id=message.threadId,
                email=inbound.sender_email,
                company=inbound.company,
                message_type=analysis.classification.type,
                draft_id=draft.id,
            )
        )
        result.record(BatchItem(id=message.id, status="succeeded", email=inbound.sender_email, draft_id=draft.id))

    def generate_for_message(self, external_id: str) -> Draft:
        """Draft a reply for one message; returns the existing draft when the source was already drafted."""
        message = self._mailbox.get_message(external_id)
        if message is None:
            raise DraftNotFound(external_id)
        existing = self._store.find_by_source(message.id, message.threadId)
        if existing is not None:
            logger.info("generate.deduped", external_id=external_id, draft_id=existing.id)
            return existing
        inbound = normalize_message(message)
        return self.context.drafter.generate(analyze(inbound))

    # Drafts

    def list_drafts(self, status: Optional[str] = None) -> list[Draft]:
        if status is not None and status not in ALL_STATUSES:
            raise InvalidRequest(f"Unknown status {status!r}; expected one of {', '.join(ALL_STATUSES)}")
        return self._store.list_by_status(status)

    def get_draft(self, draft_id: str) -> Draft:
        draft = self._store.get_by_id(draft_id)
        if draft is None:
            raise DraftNotFound(draft_id)
        return draft

    def approve(self, draft_id: str, editor_content: Optional[str] = None, approver: Optional[str] = None) -> Draft:
        return self.context.approvals.approve(draft_id, editor_content=editor_content, approver=approver)

    def reject(self, draft_id: str, reason: Optional[str], approver: Optional[str] = None) -> Draft:
        return self.context.approvals.reject(draft_id, reason, approver=approver)

    def edit(self, draft_id: str, content: str, editor_notes: Optional[str] = None) -> Draft:
        return self.context.approvals.edit(draft_id, content, editor_notes=editor_notes)

    def regenerate(self, draft_id: str, instruction: Optional[str] = None) -> Draft:
        return self.context.drafter.regenerate(self.get_draft(draft_id), instruction)

    # Sending

    def send_approved(self) -> BatchResult:
        return self.context.sender.send_approved()

    def send_followup(self, draft_id: str) -> Draft:
        return self.context.sender.send_followup(draft_id)

    # Follow-ups

    def due_followups(self, now: datetime | None = None) -> list[DueFollowup]:
        return self.context.followups.due_followups(now)

    def generate_followup(self, parent_ref: str, number: int) -> Draft:
        return self.context.followups.generate(parent_ref, number)

    # Reporting and CRM

    def metrics(self, now: datetime | None = None) -> Metrics:
        return compute_metrics(self._store.list_by_status(None), now)

    def sync_crm(self) -> BatchResult:
        return self.context.sync.reconcile(self._store.list_by_status(None))
