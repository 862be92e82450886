"""Shared CLI helpers: console, logger, service construction, draft rendering."""

from contextlib import contextmanager
from typing import Generator

import typer
from rich.console import Console
from rich.table import Table

from emailbot.context import build_context
from emailbot.errors import EmailBotError
from emailbot.models.draft import Draft
from emailbot.models.results import BatchResult
from emailbot.service import EmailBot
from emailbot.utils.logger import get_logger

console = Console()
logger = get_logger("emailbot.cli")


@contextmanager
def open_bot(command: str) -> Generator[EmailBot, None, None]:
    """Build the context for one command; domain errors become a red message and exit code 1."""
    context = build_context()
    log = logger.bind(command=command)
    try:
        yield EmailBot(context)
    except EmailBotError as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        log.error("cli.command_failed", error_type=type(e).__name__, error=str(e))
        raise typer.Exit(1) from e
    finally:
        context.close()


def drafts_table(drafts: list[Draft], title: str = "Drafts") -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Status", style="magenta")
    table.add_column("Email")
    table.add_column("Company")
    table.add_column("Lang", justify="center")
    table.add_column("Type")
    table.add_column("SLA", justify="center")
    table.add_column("Generated", style="dim")
    for d in drafts:
        table.add_row(
            d.id,
            d.status,
            d.client.email,
            d.client.company or "",
            d.analysis.language,
            f"followup #{d.followups.followup_number}" if d.is_followup else d.analysis.message_type,
            d.analysis.sla_bucket,
            d.generated_at.strftime("%Y-%m-%d %H:%M"),
        )
    return table


def print_draft(draft: Draft) -> None:
    console.print(f"\n[bold]Draft {draft.id}[/bold]  [magenta]{draft.status}[/magenta]")
    console.print(f"  To: {draft.client.name or ''} <{draft.client.email}>")
    console.print(f"  Company: {draft.client.company or '-'}  Service: {draft.client.service or '-'}")
    console.print(f"  Subject: {draft.source.subject}")
    console.print(
        f"  Language: {draft.analysis.language}  Type: {draft.analysis.message_type}  "
        f"Urgency: {draft.analysis.urgency}  SLA: {draft.analysis.sla_bucket}"
    )
    if draft.approval is not None:
        a = draft.approval
        if a.approver:
            console.print(f"  Approval: {a.approver} at {a.approved_at or '-'}")
        if a.rejection_reason:
            console.print(f"  Rejection reason: {a.rejection_reason}")
        if a.editor_notes:
            console.print(f"  Editor notes: {a.editor_notes}")
    if draft.sent_at:
        console.print(f"  Sent: {draft.sent_at.isoformat()}")
    console.print("\n[bold]Content[/bold]")
    console.print(draft.content)


def print_batch(result: BatchResult, title: str) -> None:
    console.print(
        f"\n[bold]{title}[/bold]: [green]{result.succeeded} succeeded[/green], "
        f"[red]{result.failed} failed[/red], [yellow]{result.skipped} skipped[/yellow]"
    )
    for item in result.details:
        if item.status == "succeeded":
            continue
        reason = item.error or item.detail.get("reason", "")
        console.print(f"  [dim]{item.status}[/dim] {item.id}: {reason}")
