"""Document Draft Store: one JSON file per draft under a directory."""

import os
import threading
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from emailbot.errors import DuplicateDraft
from emailbot.models.draft import Draft
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.store.document")


class DocumentDraftStore:
    """Draft persistence as <drafts_dir>/<id>.json. Corrupt files are skipped with a warning."""

    def __init__(self, drafts_dir: str | Path):
        self._dir = Path(drafts_dir)
        self._lock = threading.Lock()
        self._dir.mkdir(parents=True, exist_ok=True)
        logger.info("draft_store.document.init", drafts_dir=str(self._dir))

    def _path(self, draft_id: str) -> Path:
        return self._dir / f"{draft_id}.json"

    def _read(self, path: Path) -> Optional[Draft]:
        try:
            return Draft.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("draft_store.document.corrupt_file", path=str(path), error=str(e))
            return None

    def _write(self, draft: Draft) -> None:
        path = self._path(draft.id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(draft.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp, path)

    def _load_all(self) -> list[Draft]:
        drafts = []
        for path in self._dir.glob("*.json"):
            draft = self._read(path)
            if draft is not None:
                drafts.append(draft)
        return drafts

    def create(self, draft: Draft) -> Draft:
        with self._lock:
            if self._path(draft.id).exists():
                raise DuplicateDraft(draft.id)
            self._write(draft)
        logger.debug("draft_store.document.created", draft_id=draft.id)
        return draft

    def get_by_id(self, draft_id: str) -> Optional[Draft]:
        path = self._path(draft_id)
        if not path.exists():
            return None
        return self._read(path)

    def list_by_status(self, status: Optional[str] = None) -> list[Draft]:
        drafts = [d for d in self._load_all() if status is None or d.status == status]
        drafts.sort(key=lambda d: d.generated_at, reverse=True)
        return drafts

    def upsert(self, draft: Draft) -> Draft:
        with self._lock:
            self._write(draft)
        logger.debug("draft_store.document.upserted", draft_id=draft.id, status=draft.status)
        return draft

    def find_by_source(self, external_id: Optional[str], thread_id: Optional[str]) -> Optional[Draft]:
        for draft in self.list_by_status(None):
            if draft.is_followup:
                continue
            if draft.source.external_id == external_id and draft.source.thread_id == thread_id:
                return draft
        return None
