"""Follow-up Scheduler: due computation, templated follow-up drafts, parent slot tracking.

Due follow-ups are reported only; sending stays an explicit caller action.
"""

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional

from emailbot.errors import DraftNotFound, InvalidRequest
from emailbot.generation import registry
from emailbot.models.draft import (
    FOLLOWUP_SLOTS,
    STATUS_PENDING_REVIEW,
    STATUS_REJECTED,
    STATUS_SENT,
    Draft,
    DraftAnalysis,
    FollowupState,
    SourceRef,
    utcnow,
)
from emailbot.models.results import DueFollowup
from emailbot.store.protocol import DraftStore
from emailbot.utils.logger import get_logger, log_step

if TYPE_CHECKING:
    from emailbot.crm.bridge import SyncBridge

logger = get_logger("emailbot.followup")

DEFAULT_FOLLOWUP_DAYS = (3, 5, 6)
SUBJECT_PREFIX = {"en": "Follow-up", "es": "Seguimiento"}
DEFAULT_SUBJECT = {"en": "Inquiry", "es": "Consulta"}


def followup_content(parent: Draft, number: int) -> str:
    lang = parent.analysis.language
    defaults = registry.get_followup_defaults(lang)
    return registry.get_followup_template(lang, number).format(
        company=parent.client.company or defaults.get("company", ""),
        service=parent.client.service or defaults.get("service", ""),
    )


class FollowupScheduler:
    def __init__(
        self,
        store: DraftStore,
        sync: Optional["SyncBridge"] = None,
        followup_days: list[int] | tuple[int, ...] = DEFAULT_FOLLOWUP_DAYS,
    ):
        if len(followup_days) < len(FOLLOWUP_SLOTS):
            raise ValueError(f"Need {len(FOLLOWUP_SLOTS)} follow-up offsets, got {list(followup_days)}")
        self._store = store
        self._sync = sync
        self._offsets = {n: timedelta(days=followup_days[n - 1]) for n in FOLLOWUP_SLOTS}

    def due_followups(self, now: datetime | None = None) -> list[DueFollowup]:
        """Slot n of a sent draft is due when now >= sent_at + offset[n] and sentN is still empty."""
        now = now or utcnow()
        due = []
        for draft in self._store.list_by_status(STATUS_SENT):
            if draft.is_followup or draft.sent_at is None:
                continue
            for number in FOLLOWUP_SLOTS:
                if draft.followups.sent_at(number) is not None:
                    continue
                due_at = draft.sent_at + self._offsets[number]
                if now >= due_at:
                    due.append(
                        DueFollowup(
                            draft_id=draft.id,
                            thread_id=draft.source.thread_id,
                            email=draft.client.email,
                            number=number,
                            due_at=due_at,
                        )
                    )
        logger.info("followup.due_computed", count=len(due))
        return due

    def find_parent(self, ref: str) -> Draft:
        """Resolve a parent by draft id, falling back to the newest non-follow-up draft on that thread."""
        draft = self._store.get_by_id(ref)
        if draft is not None and not draft.is_followup:
            return draft
        for candidate in self._store.list_by_status(None):
            if not candidate.is_followup and candidate.source.thread_id == ref:
                return candidate
        raise DraftNotFound(ref)

    def find_open_followup(self, parent_id: str, number: int) -> Optional[Draft]:
        """The slot's follow-up draft that is still live (not rejected), if any."""
        for draft in self._store.list_by_status(None):
            if (
                draft.is_followup
                and draft.followups.parent_draft_id == parent_id
                and draft.followups.followup_number == number
                and draft.status != STATUS_REJECTED
            ):
                return draft
        return None

    def generate(self, parent_ref: str, number: int, now: datetime | None = None) -> Draft:
        if number not in FOLLOWUP_SLOTS:
            raise InvalidRequest(f"Follow-up number must be 1, 2 or 3, got {number}")
        parent = self.find_parent(parent_ref)
        if parent.status != STATUS_SENT:
            raise InvalidRequest(f"Draft {parent.id} has not been sent; follow-ups need a sent parent")
        if parent.followups.sent_at(number) is not None:
            raise InvalidRequest(f"Follow-up {number} for draft {parent.id} was already sent")
        existing = self.find_open_followup(parent.id, number)
        if existing is not None:
            logger.info("followup.exists", draft_id=existing.id, parent_id=parent.id, number=number)
            return existing

        lang = parent.analysis.language
        when = now or utcnow()
        draft = Draft(
            generated_at=when,
            updated_at=when,
            client=parent.client.model_copy(),
            source=SourceRef(
                external_id=parent.source.external_id,
                thread_id=parent.source.thread_id,
                subject=f"{SUBJECT_PREFIX[lang]}: {parent.source.subject or DEFAULT_SUBJECT[lang]}",
                original_message=parent.source.original_message,
            ),
            content=followup_content(parent, number),
            analysis=DraftAnalysis(language=lang, message_type="followup", followup_number=number),
            status=STATUS_PENDING_REVIEW,
            followups=FollowupState(
                sent1=parent.followups.sent1,
                sent2=parent.followups.sent2,
                sent3=parent.followups.sent3,
                is_followup=True,
                parent_draft_id=parent.id,
                followup_number=number,
            ),
        )
        self._store.create(draft)
        log_step("followup", "followup_created", {"draft_id": draft.id, "parent_id": parent.id, "number": number})
        return draft

    def mark_sent(self, followup_draft: Draft, sent_at: datetime | None = None) -> Draft:
        """Record the send on the parent's sentN slot and mirror the follow-up column. Returns the parent."""
        if not followup_draft.is_followup or not followup_draft.followups.parent_draft_id:
            raise InvalidRequest(f"Draft {followup_draft.id} is not a follow-up")
        number = followup_draft.followups.followup_number
        parent = self._store.get_by_id(followup_draft.followups.parent_draft_id)
        if parent is None:
            raise DraftNotFound(followup_draft.followups.parent_draft_id)
        when = sent_at or utcnow()
        parent.followups.mark(number, when)
        parent.touch(when)
        self._store.upsert(parent)
        logger.info("followup.parent_marked", parent_id=parent.id, number=number)
        if self._sync is not None:
            self._sync.mirror_followup(parent, number)
        return parent
