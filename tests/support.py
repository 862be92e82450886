"""Shared builders and fakes for the test suite."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from emailbot.errors import ExternalSyncFailure, GenerationFailure
from emailbot.mailbox.models import encode_body
from emailbot.models.draft import ClientInfo, Draft, DraftAnalysis, SourceRef
from emailbot.models.email import InboundMessage

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def gmail_message(
    message_id: str,
    body: str = "",
    subject: str = "Nuevo cliente potencial",
    from_header: str = "Ana Pérez <ana@acme.mx>",
    thread_id: Optional[str] = None,
    received_at: datetime = T0,
    extra_headers: Optional[dict[str, str]] = None,
    mime_type: str = "text/plain",
    parts: Optional[list[dict[str, Any]]] = None,
    label_ids: Optional[list[str]] = None,
) -> dict[str, Any]:
    """A Gmail users.messages resource as a plain dict (the inbox.json shape)."""
    headers = [
        {"name": "From", "value": from_header},
        {"name": "Subject", "value": subject},
        {"name": "Message-ID", "value": f"<{message_id}@mail.example>"},
    ]
    for name, value in (extra_headers or {}).items():
        headers.append({"name": name, "value": value})
    payload: dict[str, Any] = {"mimeType": mime_type, "headers": headers, "body": {"size": 0}}
    if parts is not None:
        payload["parts"] = parts
    elif body:
        payload["body"] = {"size": len(body), "data": encode_body(body)}
    return {
        "id": message_id,
        "threadId": thread_id or f"thread-{message_id}",
        "labelIds": label_ids or ["INBOX", "UNREAD"],
        "snippet": body[:100],
        "internalDate": str(int(received_at.timestamp() * 1000)),
        "payload": payload,
    }


def write_inbox(path: Path, messages: list[dict[str, Any]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(messages, ensure_ascii=False), encoding="utf-8")
    return path


def inbound(
    message: str = "Hola, necesito información sobre su producto para mi empresa. ¿Cuál es el precio?",
    subject: str = "Consulta",
    external_id: str = "m-1",
    thread_id: Optional[str] = "t-1",
    sender_email: str = "ana@acme.mx",
    company: Optional[str] = "Acme",
    service: Optional[str] = "desarrollo web",
    received_at: datetime = T0,
    **kwargs,
) -> InboundMessage:
    return InboundMessage(
        external_id=external_id,
        thread_id=thread_id,
        subject=subject,
        from_header=f"<{sender_email}>",
        sender_email=sender_email,
        sender_name=kwargs.pop("sender_name", "Ana"),
        company=company,
        service=service,
        body=message,
        message=message,
        received_at=received_at,
        **kwargs,
    )


def make_draft(
    status: str = "pending_review",
    generated_at: datetime = T0,
    external_id: Optional[str] = "m-1",
    thread_id: Optional[str] = "t-1",
    email: str = "ana@acme.mx",
    original_message: str = "Hola, necesito información sobre su producto.",
    language: str = "es",
    **kwargs,
) -> Draft:
    return Draft(
        generated_at=generated_at,
        updated_at=generated_at,
        client=ClientInfo(email=email, name="Ana", company="Acme", service="desarrollo web"),
        source=SourceRef(
            external_id=external_id,
            thread_id=thread_id,
            subject="Consulta",
            original_message=original_message,
        ),
        content=kwargs.pop("content", "Hola Ana, gracias por escribirnos."),
        analysis=DraftAnalysis(language=language),
        status=status,
        **kwargs,
    )


class FakeGenerator:
    """TextGenerator double: returns canned text or raises GenerationFailure, recording prompts."""

    def __init__(self, text: str = "Gracias por su mensaje.", fail: bool = False):
        self.text = text
        self.fail = fail
        self.prompts: list[str] = []
        self.timeouts: list[float] = []

    def generate(self, prompt: str, timeout_seconds: float) -> str:
        self.prompts.append(prompt)
        self.timeouts.append(timeout_seconds)
        if self.fail:
            raise GenerationFailure("Gemini request timed out after 1.0s")
        return self.text


class FakeCrm:
    """CrmClient double keeping records in memory; fail=True raises on every call."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.records: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, Any]] = []

    def _check(self, name: str, arg: Any) -> None:
        self.calls.append((name, arg))
        if self.fail:
            raise ExternalSyncFailure(f"CRM unavailable during {name}")

    def find_record_by_email(self, email: str) -> Optional[dict[str, Any]]:
        self._check("find", email)
        for record_id, fields in self.records.items():
            content = fields.get("Email", {}).get("rich_text", [{}])[0].get("text", {}).get("content")
            if content == email:
                return {"id": record_id, "properties": fields}
        return None

    def create_record(self, fields: dict[str, Any]) -> dict[str, Any]:
        self._check("create", fields)
        record_id = f"page-{len(self.records) + 1}"
        self.records[record_id] = dict(fields)
        return {"id": record_id}

    def update_record(self, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        self._check("update", (record_id, fields))
        self.records.setdefault(record_id, {}).update(fields)
        return {"id": record_id}


def days(n: float) -> timedelta:
    return timedelta(days=n)
