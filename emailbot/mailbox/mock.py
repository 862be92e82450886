"""JSON-file mailbox: reads inbox.json, appends sends to sent_items.json."""

import json
import re
from datetime import datetime, timezone
from email import message_from_string
from pathlib import Path
from typing import Any, Optional
from uuid import uuid4

from pydantic import ValidationError

from emailbot.mailbox.models import MailboxMessage, SentMessage
from emailbot.utils.logger import get_logger, log_step

logger = get_logger("emailbot.mailbox.mock")

_SUBJECT_TERM = re.compile(r'subject:(?:"([^"]*)"|(\S+))', re.I)
_UNREAD_TERM = re.compile(r"\bis:unread\b", re.I)


def _matches(message: MailboxMessage, query: str) -> bool:
    """Subset of Gmail search: subject:"..." / subject:word, is:unread, free text over subject+snippet."""
    for match in _SUBJECT_TERM.finditer(query):
        wanted = (match.group(1) or match.group(2) or "").lower()
        if wanted not in message.subject.lower():
            return False
    rest = _SUBJECT_TERM.sub("", query)
    if _UNREAD_TERM.search(rest):
        if "UNREAD" not in message.labelIds:
            return False
        rest = _UNREAD_TERM.sub("", rest)
    haystack = f"{message.subject} {message.snippet}".lower()
    return all(term.lower() in haystack for term in rest.split())


class JsonMailboxProvider:
    """Mailbox backed by JSON files, for local runs and tests."""

    def __init__(self, inbox_path: Path, sent_items_path: Path):
        self._inbox_path = Path(inbox_path)
        self._sent_items_path = Path(sent_items_path)
        self._inbox: list[MailboxMessage] = []
        logger.info(
            "mailbox.init",
            inbox_path=str(self._inbox_path),
            sent_items_path=str(self._sent_items_path),
        )
        self._load_inbox()

    def _load_inbox(self) -> None:
        if not self._inbox_path.exists():
            self._inbox = []
            logger.warning("mailbox.inbox_missing", inbox_path=str(self._inbox_path))
            return
        with self._inbox_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        items = data if isinstance(data, list) else data.get("messages", [])
        self._inbox = []
        for item in items:
            try:
                self._inbox.append(MailboxMessage.model_validate(item))
            except ValidationError as e:
                logger.warning("mailbox.invalid_message", message_id=item.get("id"), error=str(e))
        logger.info("mailbox.inbox_loaded", message_count=len(self._inbox))

    def _load_sent(self) -> list[dict[str, Any]]:
        if not self._sent_items_path.exists():
            return []
        with self._sent_items_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, list) else data.get("messages", [])

    def _save_sent(self, items: list[dict[str, Any]]) -> None:
        self._sent_items_path.parent.mkdir(parents=True, exist_ok=True)
        with self._sent_items_path.open("w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, default=str)
        logger.debug("mailbox.sent_written", count=len(items))

    def list_messages(self, query: str, limit: int) -> list[str]:
        matching = [m for m in self._inbox if _matches(m, query or "")]
        matching.sort(key=lambda m: int(m.internalDate or 0), reverse=True)
        ids = [m.id for m in matching[:limit]]
        logger.info("mailbox.list_messages", query=query, limit=limit, count=len(ids))
        return ids

    def get_message(self, message_id: str) -> Optional[MailboxMessage]:
        for m in self._inbox:
            if m.id == message_id:
                return m
        logger.debug("mailbox.get_message.miss", message_id=message_id)
        return None

    def send_message(self, raw: str, thread_id: Optional[str] = None) -> SentMessage:
        parsed = message_from_string(raw)
        sent = SentMessage(id=f"sent_{uuid4().hex[:16]}", threadId=thread_id, labelIds=["SENT"])
        log_step("mailbox", "message_sent", {"id": sent.id, "to": parsed.get("To"), "thread_id": thread_id})
        items = self._load_sent()
        items.append(
            {
                "id": sent.id,
                "threadId": thread_id,
                "to": parsed.get("To"),
                "subject": parsed.get("Subject"),
                "inReplyTo": parsed.get("In-Reply-To"),
                "sentAt": datetime.now(timezone.utc).isoformat(),
                "raw": raw,
            }
        )
        self._save_sent(items)
        return sent
