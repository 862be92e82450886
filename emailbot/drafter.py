"""Draft Generator: turns an analyzed message into a persisted reply draft."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from emailbot import language
from emailbot.errors import InvalidTransition
from emailbot.generation import registry
from emailbot.generation.prompts import build_generation_prompt, build_regeneration_prompt
from emailbot.generation.protocol import TextGenerator
from emailbot.models.analysis import Analysis
from emailbot.models.draft import (
    STATUS_PENDING_REVIEW,
    STATUS_SENT,
    ClientInfo,
    Draft,
    DraftAnalysis,
    SourceRef,
    utcnow,
)
from emailbot.store.protocol import DraftStore
from emailbot.utils.logger import get_logger, log_step
from emailbot.utils.tracing import get_tracer

if TYPE_CHECKING:
    from emailbot.approval import ApprovalStateMachine
    from emailbot.crm.bridge import SyncBridge

logger = get_logger("emailbot.drafter")

NON_ACTIONABLE = "non_actionable"


def draft_analysis_from(analysis: Analysis, lang: str) -> DraftAnalysis:
    return DraftAnalysis(
        language=lang,
        message_type=analysis.classification.type,
        sentiment=analysis.sentiment,
        urgency=analysis.urgency,
        sla_bucket=analysis.sla_bucket,
        recommended_action=analysis.recommended_action,
        priority=analysis.classification.priority,
        sla_deadline=analysis.sla_deadline,
        question_count=analysis.extracted.question_count,
        budget_mentioned=analysis.extracted.budget.mentioned,
        timeline_mentioned=analysis.extracted.timeline.mentioned,
        services=list(analysis.extracted.services),
        agent_insight=analysis.agent_insight,
    )


class DraftGenerator:
    """Generates first drafts and regenerations.

    Generation failures propagate as GenerationFailure: no templated reply is
    substituted and nothing is written to the store. The only canned text is
    the no-action notice for non-actionable mail, which never calls the model.
    """

    def __init__(
        self,
        store: DraftStore,
        generator: TextGenerator,
        approvals: "ApprovalStateMachine",
        sync: Optional["SyncBridge"] = None,
        timeout_seconds: float = 300.0,
    ):
        self._store = store
        self._generator = generator
        self._approvals = approvals
        self._sync = sync
        self._timeout_seconds = timeout_seconds

    def generate(self, analysis: Analysis, now: datetime | None = None) -> Draft:
        message = analysis.message
        original = message.message or message.body
        # The original text decides the reply language, not the analysis metadata
        lang = language.detect(original)
        log = logger.bind(external_id=message.external_id, thread_id=message.thread_id, language=lang)
        log.info("drafter.generate.start", message_type=analysis.classification.type)

        with get_tracer().start_as_current_span("drafter.generate") as span:
            span.set_attribute("emailbot.language", lang)
            span.set_attribute("emailbot.message_type", analysis.classification.type)
            if analysis.classification.type == NON_ACTIONABLE:
                content = registry.get_no_action_notice(lang)
                log.info("drafter.generate.non_actionable")
            else:
                prompt = build_generation_prompt(original, lang)
                content = self._generator.generate(prompt, self._timeout_seconds).strip()

        when = now or utcnow()
        draft = Draft(
            generated_at=when,
            updated_at=when,
            client=ClientInfo(
                email=message.sender_email,
                name=message.sender_name,
                company=message.company,
                service=message.service,
            ),
            source=SourceRef(
                external_id=message.external_id,
                thread_id=message.thread_id,
                subject=message.subject,
                original_message=original,
            ),
            content=content,
            analysis=draft_analysis_from(analysis, lang),
            status=STATUS_PENDING_REVIEW,
        )
        self._store.create(draft)
        log_step("drafter", "draft_created", {"draft_id": draft.id, "language": lang})
        if self._sync is not None:
            self._sync.mirror(draft)
        return draft

    def regenerate(self, draft: Draft, instruction: Optional[str] = None, now: datetime | None = None) -> Draft:
        """Rewrite the draft from its stored original message.

        On GenerationFailure the stored draft is untouched: prior content and
        status stay as they were and the error reaches the caller.
        """
        if draft.status == STATUS_SENT:
            raise InvalidTransition(draft.id, draft.status, STATUS_PENDING_REVIEW)

        original = draft.source.original_message
        lang = language.detect(original)
        mode, prompt = build_regeneration_prompt(
            original_message=original,
            previous_draft=draft.content,
            lang=lang,
            instruction=instruction,
            customer_name=draft.client.name,
            company=draft.client.company,
        )
        log = logger.bind(draft_id=draft.id, mode=mode, language=lang)
        log.info("drafter.regenerate.start", previous_language=draft.analysis.language)

        with get_tracer().start_as_current_span("drafter.regenerate") as span:
            span.set_attribute("emailbot.draft_id", draft.id)
            span.set_attribute("emailbot.mode", mode)
            try:
                content = self._generator.generate(prompt, self._timeout_seconds).strip()
            except Exception:
                log.error("drafter.regenerate.failed", exc_info=True)
                raise

        updated = draft.model_copy(deep=True)
        updated.content = content
        updated.analysis.language = lang
        updated.analysis.regenerated_at = now or utcnow()
        updated.analysis.regenerate_instruction = mode
        result = self._approvals.reset_after_regeneration(updated, now=now)
        log.info("drafter.regenerate.done", content_length=len(content))
        return result
