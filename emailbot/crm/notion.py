"""Notion leads database as the CRM mirror (httpx, synchronous)."""

from typing import Any, Optional

import httpx

from emailbot.errors import ExternalSyncFailure
from emailbot.models.draft import (
    STATUS_APPROVED,
    STATUS_PENDING_REVIEW,
    STATUS_REJECTED,
    STATUS_SENT,
    Draft,
)
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.crm.notion")

NOTION_BASE_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"
MESSAGE_LIMIT = 2000

STATUS_LABELS = {
    STATUS_PENDING_REVIEW: "Recibido",
    STATUS_APPROVED: "Enviado",
    STATUS_REJECTED: "Descartado",
    STATUS_SENT: "Enviado",
}

FOLLOWUP_COLUMNS = {
    1: ("Primer seguimiento", "Realizado"),
    2: ("Segundo seguimiento", "realizado"),
    3: ("Terce seguimiento", "realizado"),
}


def _rich_text(value: str) -> dict[str, Any]:
    return {"rich_text": [{"text": {"content": value}}]}


def build_properties(draft: Draft) -> dict[str, Any]:
    """Fixed Draft -> leads database field table."""
    return {
        "Form": {"title": [{"text": {"content": draft.client.name or "Unknown"}}]},
        "Email": _rich_text(draft.client.email or ""),
        "Company name": _rich_text(draft.client.company or ""),
        "Project type": _rich_text(draft.client.service or "General"),
        "Status": {"select": {"name": STATUS_LABELS.get(draft.status, "Recibido")}},
        "Date": _rich_text(draft.generated_at.date().isoformat()),
        "Message": _rich_text((draft.source.original_message or "")[:MESSAGE_LIMIT]),
    }


def followup_properties(number: int) -> dict[str, Any]:
    if number not in FOLLOWUP_COLUMNS:
        raise ValueError(f"No CRM column for follow-up {number}")
    column, label = FOLLOWUP_COLUMNS[number]
    return {column: {"select": {"name": label}}}


class NotionCrm:
    """CrmClient over the Notion REST API. Email is a rich_text property, matched with equals."""

    def __init__(
        self,
        api_key: str,
        database_id: str,
        timeout_seconds: float = 15.0,
        client: httpx.Client | None = None,
        base_url: str = NOTION_BASE_URL,
    ):
        self._database_id = database_id
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": NOTION_VERSION,
                "Content-Type": "application/json",
            },
        )

    def _request(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.request(method, path, json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "notion.http_error",
                method=method,
                path=path,
                status=e.response.status_code,
                body=e.response.text[:500],
            )
            raise ExternalSyncFailure(f"Notion {method} {path}: HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("notion.request_failed", method=method, path=path, error=str(e))
            raise ExternalSyncFailure(f"Notion {method} {path}: {e}") from e

    def find_record_by_email(self, email: str) -> Optional[dict[str, Any]]:
        data = self._request(
            "POST",
            f"/databases/{self._database_id}/query",
            {"filter": {"property": "Email", "rich_text": {"equals": email}}},
        )
        results = data.get("results") or []
        return results[0] if results else None

    def create_record(self, fields: dict[str, Any]) -> dict[str, Any]:
        page = self._request(
            "POST",
            "/pages",
            {"parent": {"database_id": self._database_id}, "properties": fields},
        )
        logger.info("notion.page_created", page_id=page.get("id"))
        return page

    def update_record(self, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        page = self._request("PATCH", f"/pages/{record_id}", {"properties": fields})
        logger.info("notion.page_updated", page_id=record_id)
        return page

    def close(self) -> None:
        self._client.close()
