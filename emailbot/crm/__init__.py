"""CRM mirror: client protocol, Notion client and the fire-and-forget sync bridge."""

from emailbot.config import Settings
from emailbot.crm.bridge import SyncBridge
from emailbot.crm.notion import NotionCrm, build_properties, followup_properties
from emailbot.crm.protocol import CrmClient
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.crm")


def create_crm(settings: Settings) -> CrmClient | None:
    """Return a Notion client when NOTION_KEY and NOTION_LEADS_DB_ID are set, else None (mirroring off)."""
    if not settings.notion_key or not settings.notion_leads_db_id:
        logger.info("crm.disabled", reason="NOTION_KEY or NOTION_LEADS_DB_ID not set")
        return None
    return NotionCrm(
        api_key=settings.notion_key,
        database_id=settings.notion_leads_db_id,
        timeout_seconds=settings.notion_timeout_seconds,
    )


__all__ = [
    "CrmClient",
    "NotionCrm",
    "SyncBridge",
    "build_properties",
    "create_crm",
    "followup_properties",
]
