"""Follow-up commands: list due slots, generate one, send one."""

import typer
from rich.table import Table

from .shared import console, open_bot, print_draft


def followups() -> None:
    """List follow-ups that are due."""
    with open_bot("followups") as bot:
        due = bot.due_followups()
    if not due:
        console.print("[green]No follow-ups due.[/green]")
        return
    table = Table(title=f"Due follow-ups ({len(due)})")
    table.add_column("Draft", style="cyan")
    table.add_column("Thread")
    table.add_column("Email")
    table.add_column("#", justify="center")
    table.add_column("Due", style="dim")
    for item in due:
        table.add_row(item.draft_id, item.thread_id or "", item.email, str(item.number), item.due_at.strftime("%Y-%m-%d"))
    console.print(table)


def followup(
    parent: str = typer.Argument(..., help="Parent draft id or thread id"),
    number: int = typer.Argument(..., help="Follow-up number (1-3)"),
) -> None:
    """Create follow-up draft #number for a sent draft."""
    with open_bot("followup") as bot:
        print_draft(bot.generate_followup(parent, number))


def send_followup(draft_id: str = typer.Argument(..., help="Approved follow-up draft id")) -> None:
    """Send an approved follow-up draft and record it on the parent."""
    with open_bot("send-followup") as bot:
        draft = bot.send_followup(draft_id)
    console.print(f"[green]Sent follow-up {draft.id}[/green]")
