"""Relational Draft Store backed by the SQLAlchemy drafts table."""

from datetime import timezone
from typing import Optional

from sqlalchemy import select

from emailbot.db import Database
from emailbot.db.models.draft_record import DraftRecord
from emailbot.errors import DuplicateDraft
from emailbot.models.draft import Draft
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.store.relational")


def _apply(row: DraftRecord, draft: Draft) -> None:
    generated_at = draft.generated_at
    if generated_at.tzinfo is not None:
        generated_at = generated_at.astimezone(timezone.utc)
    row.status = draft.status
    row.generated_at = generated_at
    row.external_id = draft.source.external_id
    row.thread_id = draft.source.thread_id
    row.client_email = draft.client.email
    row.is_followup = draft.followups.is_followup
    row.parent_draft_id = draft.followups.parent_draft_id
    row.document = draft.model_dump_json()


def _to_draft(row: DraftRecord) -> Draft:
    return Draft.model_validate_json(row.document)


class RelationalDraftStore:
    """Draft persistence in a relational table; same semantics as DocumentDraftStore."""

    def __init__(self, database: Database):
        self._db = database

    def create(self, draft: Draft) -> Draft:
        with self._db.session() as session:
            if session.get(DraftRecord, draft.id) is not None:
                raise DuplicateDraft(draft.id)
            row = DraftRecord(id=draft.id)
            _apply(row, draft)
            session.add(row)
        logger.debug("draft_store.relational.created", draft_id=draft.id)
        return draft

    def get_by_id(self, draft_id: str) -> Optional[Draft]:
        with self._db.session() as session:
            row = session.get(DraftRecord, draft_id)
            return _to_draft(row) if row is not None else None

    def list_by_status(self, status: Optional[str] = None) -> list[Draft]:
        q = select(DraftRecord).order_by(DraftRecord.generated_at.desc())
        if status is not None:
            q = q.where(DraftRecord.status == status)
        with self._db.session() as session:
            return [_to_draft(row) for row in session.scalars(q).all()]

    def upsert(self, draft: Draft) -> Draft:
        with self._db.session() as session:
            row = session.get(DraftRecord, draft.id)
            if row is None:
                row = DraftRecord(id=draft.id)
                session.add(row)
            _apply(row, draft)
        logger.debug("draft_store.relational.upserted", draft_id=draft.id, status=draft.status)
        return draft

    def find_by_source(self, external_id: Optional[str], thread_id: Optional[str]) -> Optional[Draft]:
        q = (
            select(DraftRecord)
            .where(DraftRecord.is_followup.is_(False))
            .where(DraftRecord.external_id.is_(None) if external_id is None else DraftRecord.external_id == external_id)
            .where(DraftRecord.thread_id.is_(None) if thread_id is None else DraftRecord.thread_id == thread_id)
            .order_by(DraftRecord.generated_at.desc())
        )
        with self._db.session() as session:
            row = session.scalars(q).first()
            return _to_draft(row) if row is not None else None
