"""Draft Store backends and the startup-time backend selection."""

from emailbot.config import Settings
from emailbot.db import Database
from emailbot.store.document import DocumentDraftStore
from emailbot.store.protocol import DraftStore
from emailbot.store.relational import RelationalDraftStore
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.store")


def create_store(settings: Settings) -> DraftStore:
    """Select the backend once. auto picks relational when DATABASE_URL is set, else documents."""
    backend = settings.draft_store_backend
    if backend == "auto":
        backend = "relational" if settings.database_url else "document"
    if backend == "relational":
        if not settings.database_url:
            raise ValueError("DRAFT_STORE_BACKEND=relational requires DATABASE_URL")
        logger.info("draft_store.selected", backend="relational")
        return RelationalDraftStore(Database(settings.database_url))
    if backend != "document":
        raise ValueError(f"Unknown DRAFT_STORE_BACKEND: {settings.draft_store_backend!r}")
    logger.info("draft_store.selected", backend="document", drafts_dir=str(settings.drafts_dir))
    return DocumentDraftStore(settings.drafts_dir)


__all__ = ["DocumentDraftStore", "DraftStore", "RelationalDraftStore", "create_store"]
