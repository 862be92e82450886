"""Pipeline commands: ingest, send, sync, metrics."""

from typing import Optional

import typer
from rich.table import Table

from emailbot.utils.logger import clear_context

from .shared import console, logger, open_bot, print_batch


def ingest(
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Mailbox search query"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Max messages to fetch"),
) -> None:
    """Fetch new messages and draft replies for eligible leads."""
    log = logger.bind(command="ingest")
    log.info("ingest.start", query=query, limit=limit)
    with open_bot("ingest") as bot:
        result = bot.ingest(query=query, limit=limit)
    table = Table(title=f"Leads ({result.count})")
    table.add_column("Message", style="cyan")
    table.add_column("Email")
    table.add_column("Company")
    table.add_column("Type")
    table.add_column("Draft", style="green")
    for lead in result.leads:
        table.add_row(
            lead.external_id,
            lead.email,
            lead.company or "",
            lead.message_type or "",
            f"{lead.draft_id} (existing)" if lead.deduped else (lead.draft_id or ""),
        )
    console.print(table)
    print_batch(result, "Ingest")
    clear_context()


def send() -> None:
    """Send every approved draft."""
    with open_bot("send") as bot:
        result = bot.send_approved()
    print_batch(result, "Send")
    if result.failed:
        raise typer.Exit(1)


def sync() -> None:
    """Re-mirror all drafts to the CRM."""
    with open_bot("sync") as bot:
        result = bot.sync_crm()
    print_batch(result, "CRM sync")


def metrics() -> None:
    """Show draft counts, approval rate, pending age and SLA state."""
    with open_bot("metrics") as bot:
        m = bot.metrics()
    table = Table(title="Metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    for status, count in m.counts.items():
        table.add_row(status, str(count))
    table.add_row("total", str(m.total))
    table.add_row("approval rate", f"{m.approval_rate}%")
    table.add_row("avg pending age (h)", str(m.avg_pending_age_hours))
    table.add_row("SLA breaches", str(m.sla_breaches))
    table.add_row("urgent (due < 1h)", str(m.urgent_pending))
    table.add_row("approved today", str(m.approved_today))
    table.add_row("sent today", str(m.sent_today))
    table.add_row("generated last 7 days", str(m.generated_last_7_days))
    console.print(table)
