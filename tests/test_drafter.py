"""Tests for draft generation and regeneration."""

import sys
import tempfile
from datetime import timedelta
from pathlib import Path
from unittest import TestCase, main

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from emailbot.analyzer import analyze
from emailbot.approval import ApprovalStateMachine
from emailbot.crm.bridge import SyncBridge
from emailbot.drafter import DraftGenerator
from emailbot.errors import GenerationFailure, InvalidTransition
from emailbot.generation import registry
from emailbot.store.document import DocumentDraftStore

from support import T0, FakeCrm, FakeGenerator, inbound, make_draft


class DrafterTestCase(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = DocumentDraftStore(Path(self._tmp.name) / "drafts")
        self.approvals = ApprovalStateMachine(self.store)
        self.generator = FakeGenerator(text="  Hola Ana, gracias por escribirnos.  ")

    def tearDown(self):
        self._tmp.cleanup()

    def drafter(self, generator=None, sync=None, timeout_seconds=12.5):
        return DraftGenerator(
            self.store,
            generator or self.generator,
            self.approvals,
            sync=sync,
            timeout_seconds=timeout_seconds,
        )


class TestGenerate(DrafterTestCase):
    def test_creates_pending_draft_from_model_output(self):
        analysis = analyze(inbound(), now=T0)
        draft = self.drafter().generate(analysis, now=T0)

        self.assertEqual(draft.status, "pending_review")
        self.assertEqual(draft.content, "Hola Ana, gracias por escribirnos.")
        self.assertEqual(draft.analysis.language, "es")
        self.assertEqual(draft.analysis.message_type, "lead")
        self.assertEqual(draft.client.email, "ana@acme.mx")
        self.assertEqual(draft.source.external_id, "m-1")
        self.assertEqual(draft.source.thread_id, "t-1")
        self.assertEqual(draft.source.original_message, analysis.message.message)
        self.assertEqual(draft.generated_at, T0)
        self.assertEqual(self.store.get_by_id(draft.id), draft)

    def test_prompt_carries_language_and_message(self):
        self.drafter().generate(analyze(inbound(), now=T0))

        self.assertEqual(len(self.generator.prompts), 1)
        prompt = self.generator.prompts[0]
        self.assertIn("Spanish", prompt)
        self.assertIn("¿Cuál es el precio?", prompt)
        self.assertEqual(self.generator.timeouts, [12.5])

    def test_english_message_gets_english_reply_language(self):
        message = "Hi, I need information about your product and pricing for our company website."
        draft = self.drafter().generate(analyze(inbound(message=message), now=T0))

        self.assertEqual(draft.analysis.language, "en")
        self.assertIn("English", self.generator.prompts[0])

    def test_failure_propagates_and_persists_nothing(self):
        drafter = self.drafter(generator=FakeGenerator(fail=True))

        with self.assertRaises(GenerationFailure):
            drafter.generate(analyze(inbound(), now=T0))
        self.assertEqual(self.store.list_by_status(None), [])

    def test_non_actionable_uses_notice_without_calling_model(self):
        analysis = analyze(
            inbound(
                sender_email="noreply@billing.example",
                subject="Invoice for March",
                message="Your invoice is attached. Thank you for your payment.",
            ),
            now=T0,
        )
        draft = self.drafter().generate(analysis)

        self.assertEqual(self.generator.prompts, [])
        self.assertEqual(draft.content, registry.get_no_action_notice("en"))
        self.assertEqual(draft.analysis.message_type, "non_actionable")
        self.assertEqual(draft.status, "pending_review")

    def test_new_draft_is_mirrored(self):
        crm = FakeCrm()
        sync = SyncBridge(crm)
        draft = self.drafter(sync=sync).generate(analyze(inbound(), now=T0))
        sync.shutdown(wait=True)

        self.assertEqual(len(crm.records), 1)
        record = next(iter(crm.records.values()))
        self.assertEqual(record["Status"], {"select": {"name": "Recibido"}})
        self.assertEqual(record["Email"]["rich_text"][0]["text"]["content"], draft.client.email)

    def test_crm_failure_does_not_block_generation(self):
        sync = SyncBridge(FakeCrm(fail=True))
        draft = self.drafter(sync=sync).generate(analyze(inbound(), now=T0))
        sync.shutdown(wait=True)

        self.assertIsNotNone(self.store.get_by_id(draft.id))


class TestRegenerate(DrafterTestCase):
    def setUp(self):
        super().setUp()
        # Stored with a wrong language tag; the original message is Spanish
        self.draft = self.store.create(make_draft(language="en", content="Old reply"))

    def test_rewrites_content_and_rederives_language(self):
        generator = FakeGenerator(text="Hola Ana, versión corta.")
        updated = self.drafter(generator=generator).regenerate(self.draft, "shorten", now=T0 + timedelta(hours=1))

        self.assertEqual(updated.content, "Hola Ana, versión corta.")
        self.assertEqual(updated.analysis.language, "es")
        self.assertEqual(updated.analysis.regenerate_instruction, "shorten")
        self.assertEqual(updated.analysis.regenerated_at, T0 + timedelta(hours=1))
        self.assertEqual(updated.status, "pending_review")
        self.assertEqual(updated.source.original_message, self.draft.source.original_message)
        self.assertEqual(self.store.get_by_id(self.draft.id).content, "Hola Ana, versión corta.")

    def test_prompt_uses_original_and_previous_draft(self):
        generator = FakeGenerator(text="Nuevo texto")
        self.drafter(generator=generator).regenerate(self.draft, "shorten")

        prompt = generator.prompts[0]
        self.assertIn("Make it shorter.", prompt)
        self.assertIn("Write the reply in Spanish.", prompt)
        self.assertIn(self.draft.source.original_message, prompt)
        self.assertIn("Old reply", prompt)

    def test_unknown_instruction_falls_back_to_rewrite(self):
        updated = self.drafter().regenerate(self.draft, "make it sparkle")

        self.assertEqual(updated.analysis.regenerate_instruction, "rewrite")
        self.assertIn("Rewrite naturally.", self.generator.prompts[0])

    def test_failure_keeps_stored_draft(self):
        drafter = self.drafter(generator=FakeGenerator(fail=True))

        with self.assertRaises(GenerationFailure):
            drafter.regenerate(self.draft, "expand")
        stored = self.store.get_by_id(self.draft.id)
        self.assertEqual(stored.content, "Old reply")
        self.assertEqual(stored.status, "pending_review")
        self.assertEqual(stored.analysis.language, "en")
        self.assertIsNone(stored.analysis.regenerated_at)

    def test_approved_draft_returns_to_review(self):
        self.approvals.approve(self.draft.id, approver="maria")
        approved = self.store.get_by_id(self.draft.id)

        updated = self.drafter().regenerate(approved)
        self.assertEqual(updated.status, "pending_review")
        self.assertEqual(updated.approval.approver, "maria")

    def test_sent_draft_cannot_be_regenerated(self):
        sent = self.store.create(make_draft(status="sent", external_id="m-2", thread_id="t-2"))

        with self.assertRaises(InvalidTransition):
            self.drafter().regenerate(sent)
        self.assertEqual(self.generator.prompts, [])


if __name__ == "__main__":
    main()
