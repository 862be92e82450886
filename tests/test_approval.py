"""Tests for the approval state machine."""

import sys
import tempfile
from datetime import timedelta
from pathlib import Path
from unittest import TestCase, main

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from emailbot.approval import TRANSITIONS, ApprovalStateMachine, can_transition
from emailbot.crm.bridge import SyncBridge
from emailbot.crm.notion import build_properties
from emailbot.errors import DraftNotFound, InvalidRequest, InvalidTransition
from emailbot.followup import FollowupScheduler
from emailbot.store.document import DocumentDraftStore

from support import T0, FakeCrm, make_draft

LATER = T0 + timedelta(hours=2)


class TestTransitionTable(TestCase):
    def test_allowed_moves(self):
        self.assertTrue(can_transition("pending_review", "approved"))
        self.assertTrue(can_transition("pending_review", "rejected"))
        self.assertTrue(can_transition("approved", "sent"))

    def test_terminal_states(self):
        self.assertEqual(TRANSITIONS["sent"], frozenset())
        self.assertEqual(TRANSITIONS["rejected"], frozenset())
        self.assertFalse(can_transition("pending_review", "sent"))
        self.assertFalse(can_transition("approved", "rejected"))
        self.assertFalse(can_transition("unknown", "approved"))


class TestApprovalStateMachine(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = DocumentDraftStore(Path(self._tmp.name))
        self.machine = ApprovalStateMachine(self.store, default_approver="sales-team")
        self.draft = self.store.create(make_draft())

    def tearDown(self):
        self._tmp.cleanup()

    def test_approve_records_decision(self):
        approved = self.machine.approve(self.draft.id, approver="maria", now=LATER)

        self.assertEqual(approved.status, "approved")
        self.assertEqual(approved.approval.approver, "maria")
        self.assertEqual(approved.approval.approved_at, LATER)
        self.assertIsNone(approved.approval.editor_content)
        self.assertEqual(approved.content, self.draft.content)
        self.assertEqual(approved.updated_at, LATER)
        self.assertEqual(self.store.get_by_id(self.draft.id).status, "approved")

    def test_approve_with_editor_content_replaces_content(self):
        approved = self.machine.approve(self.draft.id, editor_content="Texto final revisado.")

        self.assertEqual(approved.content, "Texto final revisado.")
        self.assertEqual(approved.approval.editor_content, "Texto final revisado.")
        self.assertEqual(approved.approval.approver, "sales-team")

    def test_blank_editor_content_is_ignored(self):
        approved = self.machine.approve(self.draft.id, editor_content="   ")

        self.assertEqual(approved.content, self.draft.content)
        self.assertIsNone(approved.approval.editor_content)

    def test_approve_twice_is_invalid(self):
        self.machine.approve(self.draft.id)

        with self.assertRaises(InvalidTransition) as ctx:
            self.machine.approve(self.draft.id)
        self.assertEqual(ctx.exception.current, "approved")
        self.assertEqual(ctx.exception.target, "approved")

    def test_reject_requires_reason(self):
        for reason in (None, "", "  "):
            with self.subTest(reason=reason):
                with self.assertRaises(InvalidRequest):
                    self.machine.reject(self.draft.id, reason)
        self.assertEqual(self.store.get_by_id(self.draft.id).status, "pending_review")

    def test_reject_records_reason(self):
        rejected = self.machine.reject(self.draft.id, "  Tono demasiado informal ", now=LATER)

        self.assertEqual(rejected.status, "rejected")
        self.assertEqual(rejected.approval.rejection_reason, "Tono demasiado informal")
        self.assertEqual(rejected.approval.approved_at, LATER)

    def test_rejected_cannot_be_approved(self):
        self.machine.reject(self.draft.id, "spam")

        with self.assertRaises(InvalidTransition):
            self.machine.approve(self.draft.id)

    def test_edit_returns_to_review(self):
        self.machine.approve(self.draft.id)
        edited = self.machine.edit(self.draft.id, "Nuevo contenido", editor_notes="precio corregido")

        self.assertEqual(edited.status, "pending_review")
        self.assertEqual(edited.content, "Nuevo contenido")
        self.assertEqual(edited.approval.editor_notes, "precio corregido")

    def test_edit_reopens_rejected_draft(self):
        self.machine.reject(self.draft.id, "too long")
        edited = self.machine.edit(self.draft.id, "Versión corta")

        self.assertEqual(edited.status, "pending_review")
        self.assertEqual(edited.approval.rejection_reason, "too long")

    def test_edit_rejects_blank_content(self):
        with self.assertRaises(InvalidRequest):
            self.machine.edit(self.draft.id, "   ")

    def test_sent_draft_is_immutable(self):
        self.machine.approve(self.draft.id)
        sent = self.machine.mark_sent(self.draft.id, sent_at=LATER)
        self.assertEqual(sent.status, "sent")
        self.assertEqual(sent.sent_at, LATER)

        with self.assertRaises(InvalidTransition):
            self.machine.edit(self.draft.id, "late change")
        with self.assertRaises(InvalidTransition):
            self.machine.reject(self.draft.id, "too late")
        with self.assertRaises(InvalidTransition):
            self.machine.mark_sent(self.draft.id)

    def test_mark_sent_requires_approval(self):
        with self.assertRaises(InvalidTransition):
            self.machine.mark_sent(self.draft.id)

    def test_unknown_draft(self):
        with self.assertRaises(DraftNotFound):
            self.machine.approve("does-not-exist")

    def test_decisions_are_mirrored(self):
        crm = FakeCrm()
        sync = SyncBridge(crm)
        machine = ApprovalStateMachine(self.store, sync=sync)
        machine.reject(self.draft.id, "no fit")
        sync.shutdown(wait=True)

        record = next(iter(crm.records.values()))
        self.assertEqual(record["Status"], {"select": {"name": "Descartado"}})

    def test_crm_failure_keeps_store_write(self):
        sync = SyncBridge(FakeCrm(fail=True))
        machine = ApprovalStateMachine(self.store, sync=sync)
        machine.approve(self.draft.id)
        sync.shutdown(wait=True)

        self.assertEqual(self.store.get_by_id(self.draft.id).status, "approved")

    def test_edit_notes_without_decision(self):
        edited = self.machine.edit(self.draft.id, "Nuevo contenido", editor_notes="tono más formal")

        self.assertEqual(edited.approval.editor_notes, "tono más formal")
        self.assertIsNone(edited.approval.approver)
        self.assertIsNone(edited.approval.approved_at)

    def test_followup_decisions_leave_lead_record_alone(self):
        crm = FakeCrm()
        parent = self.store.create(make_draft(status="sent", sent_at=T0, external_id="m-9", thread_id="t-9"))
        crm.create_record(build_properties(parent))
        sync = SyncBridge(crm)
        machine = ApprovalStateMachine(self.store, sync=sync)
        followup = FollowupScheduler(self.store).generate(parent.id, 1)

        machine.edit(followup.id, "nuevo texto")
        machine.approve(followup.id)
        sync.shutdown(wait=True)

        self.assertEqual(crm.records["page-1"]["Status"], {"select": {"name": "Enviado"}})
        self.assertEqual([name for name, _ in crm.calls], ["create"])


if __name__ == "__main__":
    main()
