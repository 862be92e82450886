"""Sync Bridge: best-effort mirroring of draft state to the CRM.

mirror() hands the work to a small thread pool and returns the Future
without waiting. Failures are logged and never reach the caller or roll
back the store write that triggered them; reconcile() is the periodic
sweep that repairs whatever the inline path missed.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, Optional

from emailbot.crm.notion import build_properties, followup_properties
from emailbot.crm.protocol import CrmClient
from emailbot.models.draft import Draft
from emailbot.models.results import BatchItem, BatchResult
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.crm.bridge")


class SyncBridge:
    def __init__(self, crm: Optional[CrmClient], max_workers: int = 2):
        self._crm = crm
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="crm-sync")

    @property
    def enabled(self) -> bool:
        return self._crm is not None

    def _upsert(self, draft: Draft) -> str:
        """Create or update the lead record for this draft. Raises on CRM failure."""
        fields = build_properties(draft)
        existing = self._crm.find_record_by_email(draft.client.email)
        if existing is not None:
            self._crm.update_record(existing["id"], fields)
            return existing["id"]
        created = self._crm.create_record(fields)
        return created.get("id", "")

    def sync_draft(self, draft: Draft) -> bool:
        """Synchronous mirror of one draft. Returns False (and logs) on failure."""
        if self._crm is None:
            logger.debug("sync.disabled", draft_id=draft.id)
            return False
        try:
            record_id = self._upsert(draft)
        except Exception as e:
            logger.warning("sync.mirror.failed", draft_id=draft.id, status=draft.status, error=str(e))
            return False
        logger.info("sync.mirror.done", draft_id=draft.id, status=draft.status, record_id=record_id)
        return True

    def mirror(self, draft: Draft) -> Optional[Future]:
        """Fire-and-forget mirror. The snapshot is copied so later mutations don't race the worker."""
        if self._crm is None:
            logger.debug("sync.disabled", draft_id=draft.id)
            return None
        # Follow-ups share the lead's record; only mirror_followup touches it for them
        if draft.is_followup:
            logger.debug("sync.mirror.skipped_followup", draft_id=draft.id)
            return None
        return self._executor.submit(self.sync_draft, draft.model_copy(deep=True))

    def _sync_followup(self, parent: Draft, number: int) -> bool:
        try:
            existing = self._crm.find_record_by_email(parent.client.email)
            if existing is None:
                logger.warning("sync.followup.no_record", draft_id=parent.id, number=number)
                return False
            self._crm.update_record(existing["id"], followup_properties(number))
        except Exception as e:
            logger.warning("sync.followup.failed", draft_id=parent.id, number=number, error=str(e))
            return False
        logger.info("sync.followup.done", draft_id=parent.id, number=number)
        return True

    def mirror_followup(self, parent: Draft, number: int) -> Optional[Future]:
        if self._crm is None:
            logger.debug("sync.disabled", draft_id=parent.id)
            return None
        return self._executor.submit(self._sync_followup, parent.model_copy(deep=True), number)

    def reconcile(self, drafts: Iterable[Draft]) -> BatchResult:
        """Re-mirror every non-follow-up draft synchronously, reporting per-draft outcomes."""
        result = BatchResult()
        if self._crm is None:
            logger.info("sync.reconcile.disabled")
            return result
        for draft in drafts:
            if draft.is_followup:
                result.record(BatchItem(id=draft.id, status="skipped", email=draft.client.email, detail={"reason": "followup"}))
                continue
            try:
                record_id = self._upsert(draft)
            except Exception as e:
                logger.warning("sync.reconcile.item_failed", draft_id=draft.id, error=str(e))
                result.record(BatchItem(id=draft.id, status="failed", email=draft.client.email, draft_id=draft.id, error=str(e)))
                continue
            result.record(
                BatchItem(
                    id=draft.id,
                    status="succeeded",
                    email=draft.client.email,
                    draft_id=draft.id,
                    detail={"record_id": record_id},
                )
            )
        logger.info("sync.reconcile.done", succeeded=result.succeeded, failed=result.failed, skipped=result.skipped)
        return result

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
