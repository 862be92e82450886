"""Tests for sending approved drafts and follow-ups."""

import json
import sys
import tempfile
from email import message_from_string
from pathlib import Path
from unittest import TestCase, main

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from emailbot.approval import ApprovalStateMachine
from emailbot.errors import ExternalSyncFailure, InvalidRequest, InvalidTransition
from emailbot.followup import FollowupScheduler
from emailbot.mailbox import JsonMailboxProvider
from emailbot.sender import Sender
from emailbot.store.document import DocumentDraftStore

from support import T0, days, gmail_message, make_draft, write_inbox


class FlakyMailbox(JsonMailboxProvider):
    """Refuses to deliver to the given recipients."""

    def __init__(self, *args, refuse=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.refuse = set(refuse)

    def send_message(self, raw, thread_id=None):
        if message_from_string(raw).get("To") in self.refuse:
            raise ExternalSyncFailure("mailbox rejected the message")
        return super().send_message(raw, thread_id=thread_id)


class TestSender(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        inbox = write_inbox(root / "inbox.json", [gmail_message("m-1", body="Hola")])
        self.sent_path = root / "sent_items.json"
        self.store = DocumentDraftStore(root / "drafts")
        self.mailbox = FlakyMailbox(inbox, self.sent_path, refuse={"bad@x.com"})
        self.approvals = ApprovalStateMachine(self.store)
        self.followups = FollowupScheduler(self.store)
        self.sender = Sender(self.store, self.mailbox, self.approvals, self.followups, from_address="ventas@studio.mx")

    def tearDown(self):
        self._tmp.cleanup()

    def sent_items(self):
        if not self.sent_path.exists():
            return []
        return json.loads(self.sent_path.read_text(encoding="utf-8"))

    def approved(self, **kwargs):
        draft = self.store.create(make_draft(**kwargs))
        return self.approvals.approve(draft.id)

    def test_send_draft_threads_reply(self):
        draft = self.approved()
        sent = self.sender.send_draft(draft.id, now=T0)

        self.assertEqual(sent.status, "sent")
        self.assertEqual(sent.sent_at, T0)
        self.assertEqual(self.store.get_by_id(draft.id).status, "sent")
        items = self.sent_items()
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]["to"], "ana@acme.mx")
        self.assertEqual(items[0]["threadId"], "t-1")
        self.assertEqual(items[0]["inReplyTo"], "<m-1@mail.example>")
        self.assertEqual(items[0]["subject"], "Re: Consulta")

    def test_unknown_original_sends_without_threading_header(self):
        draft = self.approved(external_id="gone")
        self.sender.send_draft(draft.id)

        self.assertIsNone(self.sent_items()[0]["inReplyTo"])

    def test_only_approved_drafts_are_sent(self):
        pending = self.store.create(make_draft())

        with self.assertRaises(InvalidTransition):
            self.sender.send_draft(pending.id)
        self.assertEqual(self.sent_items(), [])

    def test_send_approved_partial_success(self):
        good = self.approved(external_id="m-1")
        bad = self.approved(external_id="m-2", email="bad@x.com")
        self.store.create(make_draft(external_id="m-3"))

        result = self.sender.send_approved(now=T0)
        items = {item.id: item for item in result.details}

        self.assertEqual((result.succeeded, result.failed), (1, 1))
        self.assertEqual(items[good.id].status, "succeeded")
        self.assertIn("mailbox rejected", items[bad.id].error)
        self.assertEqual(self.store.get_by_id(good.id).status, "sent")
        self.assertEqual(self.store.get_by_id(bad.id).status, "approved")
        self.assertEqual(len(self.sent_items()), 1)

    def test_send_followup_marks_parent_slot(self):
        parent = self.store.create(make_draft(status="sent", sent_at=T0))
        followup = self.followups.generate(parent.id, 1)
        self.approvals.approve(followup.id)

        sent = self.sender.send_followup(followup.id, now=T0 + days(3))

        self.assertEqual(sent.status, "sent")
        self.assertEqual(self.store.get_by_id(parent.id).followups.sent1, T0 + days(3))
        self.assertEqual(self.sent_items()[0]["subject"], "Seguimiento: Consulta")

    def test_send_approved_includes_followups(self):
        parent = self.store.create(make_draft(status="sent", sent_at=T0))
        followup = self.followups.generate(parent.id, 2)
        self.approvals.approve(followup.id)

        result = self.sender.send_approved(now=T0 + days(5))

        self.assertEqual(result.succeeded, 1)
        self.assertEqual(self.store.get_by_id(parent.id).followups.sent2, T0 + days(5))

    def test_send_followup_rejects_regular_draft(self):
        draft = self.approved()

        with self.assertRaises(InvalidRequest):
            self.sender.send_followup(draft.id)


if __name__ == "__main__":
    main()
