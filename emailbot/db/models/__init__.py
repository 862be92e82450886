"""ORM models."""

from emailbot.db.models.draft_record import DraftRecord

__all__ = ["DraftRecord"]
