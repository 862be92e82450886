"""Error taxonomy for the draft lifecycle."""


class EmailBotError(Exception):
    """Base class for every error raised by emailbot."""


class DraftNotFound(EmailBotError):
    """No draft (or parent thread) matches the requested identifier."""

    def __init__(self, draft_id: str):
        super().__init__(f"Draft not found: {draft_id}")
        self.draft_id = draft_id


class InvalidTransition(EmailBotError):
    """A status change the approval workflow does not allow."""

    def __init__(self, draft_id: str, current: str, target: str):
        super().__init__(f"Draft {draft_id}: cannot go from {current!r} to {target!r}")
        self.draft_id = draft_id
        self.current = current
        self.target = target


class GenerationFailure(EmailBotError):
    """The text-generation service failed, timed out or returned nothing usable."""


class ExternalSyncFailure(EmailBotError):
    """The CRM mirror or mailbox rejected or could not be reached for a sync call."""


class MalformedSource(EmailBotError):
    """An inbound message cannot be turned into a lead (no sender address)."""

    def __init__(self, external_id: str, reason: str = "missing sender address"):
        super().__init__(f"Message {external_id}: {reason}")
        self.external_id = external_id
        self.reason = reason


class InvalidRequest(EmailBotError, ValueError):
    """The caller passed arguments the operation cannot accept."""


class DuplicateDraft(EmailBotError):
    """create() was called with an id that already exists in the store."""

    def __init__(self, draft_id: str):
        super().__init__(f"Draft already exists: {draft_id}")
        self.draft_id = draft_id
