"""Draft Store protocol: the repository interface every backend implements."""

from typing import Optional, Protocol

from emailbot.models.draft import Draft


class DraftStore(Protocol):
    """Persistence for Draft records.

    Backends share observable semantics: get_by_id returns None for a missing
    id, list_by_status(None) returns every draft newest-generated first, and
    upsert replaces the whole record keyed by id.
    """

    def create(self, draft: Draft) -> Draft:
        """Insert a new draft. Raises DuplicateDraft if the id is taken."""
        ...

    def get_by_id(self, draft_id: str) -> Optional[Draft]:
        ...

    def list_by_status(self, status: Optional[str] = None) -> list[Draft]:
        ...

    def upsert(self, draft: Draft) -> Draft:
        ...

    def find_by_source(self, external_id: Optional[str], thread_id: Optional[str]) -> Optional[Draft]:
        """Return the non-follow-up draft for this source pair, if any."""
        ...
