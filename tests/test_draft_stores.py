"""Tests for both Draft Store backends against one shared contract."""

import sys
import tempfile
from pathlib import Path
from unittest import TestCase, main

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from emailbot.config import Settings
from emailbot.db import Database
from emailbot.errors import DuplicateDraft
from emailbot.models.draft import FollowupState
from emailbot.store import DocumentDraftStore, RelationalDraftStore, create_store

from support import T0, days, make_draft


class DraftStoreContract:
    """Mixed into a TestCase whose setUp assigns self.store."""

    def test_create_and_get(self):
        draft = make_draft()
        self.store.create(draft)

        loaded = self.store.get_by_id(draft.id)
        self.assertEqual(loaded, draft)
        self.assertEqual(loaded.generated_at, T0)

    def test_get_missing_returns_none(self):
        self.assertIsNone(self.store.get_by_id("missing"))

    def test_create_rejects_duplicate_id(self):
        draft = self.store.create(make_draft())

        with self.assertRaises(DuplicateDraft):
            self.store.create(draft)

    def test_list_newest_first(self):
        old = self.store.create(make_draft(generated_at=T0, external_id="m-1"))
        new = self.store.create(make_draft(generated_at=T0 + days(2), external_id="m-3"))
        mid = self.store.create(make_draft(generated_at=T0 + days(1), external_id="m-2"))

        self.assertEqual([d.id for d in self.store.list_by_status(None)], [new.id, mid.id, old.id])

    def test_list_filters_by_status(self):
        pending = self.store.create(make_draft(external_id="m-1"))
        self.store.create(make_draft(status="sent", external_id="m-2"))

        self.assertEqual([d.id for d in self.store.list_by_status("pending_review")], [pending.id])
        self.assertEqual(self.store.list_by_status("rejected"), [])

    def test_upsert_replaces_record(self):
        draft = self.store.create(make_draft())
        draft.status = "approved"
        draft.content = "Contenido aprobado"
        self.store.upsert(draft)

        loaded = self.store.get_by_id(draft.id)
        self.assertEqual(loaded.status, "approved")
        self.assertEqual(loaded.content, "Contenido aprobado")
        self.assertEqual([d.id for d in self.store.list_by_status("approved")], [draft.id])
        self.assertEqual(self.store.list_by_status("pending_review"), [])

    def test_upsert_inserts_unknown_id(self):
        draft = make_draft()
        self.store.upsert(draft)

        self.assertEqual(self.store.get_by_id(draft.id), draft)

    def test_find_by_source_matches_exact_pair(self):
        draft = self.store.create(make_draft(external_id="m-1", thread_id="t-1"))

        self.assertEqual(self.store.find_by_source("m-1", "t-1").id, draft.id)
        self.assertIsNone(self.store.find_by_source("m-1", "t-2"))
        self.assertIsNone(self.store.find_by_source("m-2", "t-1"))

    def test_find_by_source_with_missing_thread(self):
        draft = self.store.create(make_draft(external_id="m-1", thread_id=None))

        self.assertEqual(self.store.find_by_source("m-1", None).id, draft.id)
        self.assertIsNone(self.store.find_by_source("m-1", "t-1"))

    def test_find_by_source_ignores_followups(self):
        followup = make_draft(
            followups=FollowupState(is_followup=True, parent_draft_id="parent-1", followup_number=1),
        )
        self.store.create(followup)
        self.assertIsNone(self.store.find_by_source("m-1", "t-1"))

        parent = self.store.create(make_draft(generated_at=T0 - days(3)))
        self.assertEqual(self.store.find_by_source("m-1", "t-1").id, parent.id)


class TestDocumentDraftStore(DraftStoreContract, TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.drafts_dir = Path(self._tmp.name) / "drafts"
        self.store = DocumentDraftStore(self.drafts_dir)

    def tearDown(self):
        self._tmp.cleanup()

    def test_one_file_per_draft(self):
        draft = self.store.create(make_draft())

        self.assertEqual([p.name for p in self.drafts_dir.glob("*.json")], [f"{draft.id}.json"])

    def test_corrupt_file_is_skipped(self):
        draft = self.store.create(make_draft())
        (self.drafts_dir / "broken.json").write_text("{not json", encoding="utf-8")

        self.assertEqual([d.id for d in self.store.list_by_status(None)], [draft.id])
        self.assertIsNone(self.store.get_by_id("broken"))

    def test_survives_new_instance(self):
        draft = self.store.create(make_draft())

        self.assertEqual(DocumentDraftStore(self.drafts_dir).get_by_id(draft.id), draft)


class TestRelationalDraftStore(DraftStoreContract, TestCase):
    def setUp(self):
        self.database = Database("sqlite:///:memory:")
        self.store = RelationalDraftStore(self.database)

    def tearDown(self):
        self.database.dispose()


class TestCreateStore(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.drafts_dir = Path(self._tmp.name) / "drafts"

    def tearDown(self):
        self._tmp.cleanup()

    def test_auto_without_database_url_uses_documents(self):
        store = create_store(Settings(drafts_dir=self.drafts_dir))
        self.assertIsInstance(store, DocumentDraftStore)

    def test_auto_with_database_url_uses_relational(self):
        store = create_store(Settings(drafts_dir=self.drafts_dir, database_url="sqlite:///:memory:"))
        self.assertIsInstance(store, RelationalDraftStore)

    def test_relational_without_url_fails(self):
        with self.assertRaises(ValueError):
            create_store(Settings(drafts_dir=self.drafts_dir, draft_store_backend="relational"))

    def test_unknown_backend_fails(self):
        with self.assertRaises(ValueError):
            create_store(Settings(drafts_dir=self.drafts_dir, draft_store_backend="mongo"))


if __name__ == "__main__":
    main()
