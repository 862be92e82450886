"""CRM mirror protocol."""

from typing import Any, Optional, Protocol


class CrmClient(Protocol):
    """Record store kept eventually consistent with draft state.

    Implementations raise ExternalSyncFailure when the CRM rejects a call or
    cannot be reached.
    """

    def find_record_by_email(self, email: str) -> Optional[dict[str, Any]]:
        ...

    def create_record(self, fields: dict[str, Any]) -> dict[str, Any]:
        ...

    def update_record(self, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        ...
