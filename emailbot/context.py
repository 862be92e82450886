"""Application context: every collaborator built once at startup and passed down explicitly."""

from typing import Optional

from emailbot.approval import ApprovalStateMachine
from emailbot.config import Settings
from emailbot.crm import SyncBridge, create_crm
from emailbot.crm.protocol import CrmClient
from emailbot.drafter import DraftGenerator
from emailbot.followup import FollowupScheduler
from emailbot.generation import create_generator
from emailbot.generation.protocol import TextGenerator
from emailbot.mailbox import JsonMailboxProvider
from emailbot.mailbox.protocol import MailboxProvider
from emailbot.sender import Sender
from emailbot.store import create_store
from emailbot.store.protocol import DraftStore
from emailbot.utils.logger import BoundLogger, get_logger


class AppContext:
    def __init__(
        self,
        settings: Settings,
        logger: BoundLogger,
        store: DraftStore,
        generator: TextGenerator,
        mailbox: MailboxProvider,
        sync: SyncBridge,
    ):
        self.settings = settings
        self.logger = logger
        self.store = store
        self.generator = generator
        self.mailbox = mailbox
        self.sync = sync
        self.approvals = ApprovalStateMachine(store, sync=sync, default_approver=settings.approver_name)
        self.drafter = DraftGenerator(
            store,
            generator,
            self.approvals,
            sync=sync,
            timeout_seconds=settings.generation_timeout_seconds,
        )
        self.followups = FollowupScheduler(store, sync=sync, followup_days=settings.followup_days)
        self.sender = Sender(
            store,
            mailbox,
            self.approvals,
            self.followups,
            from_address=settings.gmail_user or "me",
        )

    def close(self) -> None:
        self.sync.shutdown(wait=True)


def build_context(
    settings: Optional[Settings] = None,
    store: Optional[DraftStore] = None,
    generator: Optional[TextGenerator] = None,
    mailbox: Optional[MailboxProvider] = None,
    crm: Optional[CrmClient] = None,
) -> AppContext:
    """Build the context. Anything not injected is created from settings; the store backend is chosen here only."""
    settings = settings or Settings.from_env()
    logger = get_logger("emailbot")
    if crm is None:
        crm = create_crm(settings)
    context = AppContext(
        settings=settings,
        logger=logger,
        store=store or create_store(settings),
        generator=generator or create_generator(settings),
        mailbox=mailbox or JsonMailboxProvider(settings.inbox_path, settings.sent_items_path),
        sync=SyncBridge(crm, max_workers=settings.sync_worker_count),
    )
    logger.info(
        "context.built",
        store=type(context.store).__name__,
        generator=type(context.generator).__name__,
        crm_enabled=context.sync.enabled,
    )
    return context
