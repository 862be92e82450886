"""Draft review commands: list, show, approve, reject, edit, regenerate."""

from typing import Optional

import typer

from .shared import console, drafts_table, open_bot, print_draft


def list_drafts(
    status: Optional[str] = typer.Option(None, "--status", "-s", help="pending_review | approved | rejected | sent"),
) -> None:
    """List drafts, newest first."""
    with open_bot("list") as bot:
        drafts = bot.list_drafts(status)
        if not drafts:
            console.print("[yellow]No drafts.[/yellow]")
            return
        console.print(drafts_table(drafts, title=f"Drafts ({status or 'all'})"))


def show(draft_id: str = typer.Argument(..., help="Draft id")) -> None:
    """Show one draft in full."""
    with open_bot("show") as bot:
        print_draft(bot.get_draft(draft_id))


def approve(
    draft_id: str = typer.Argument(..., help="Draft id"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Replacement content (editor override)"),
    approver: Optional[str] = typer.Option(None, "--approver", "-a", help="Approver name"),
) -> None:
    """Approve a pending draft, optionally replacing its content."""
    with open_bot("approve") as bot:
        draft = bot.approve(draft_id, editor_content=content, approver=approver)
        console.print(f"[green]Approved {draft.id}[/green]")


def reject(
    draft_id: str = typer.Argument(..., help="Draft id"),
    reason: str = typer.Option(..., "--reason", "-r", help="Why the draft is rejected"),
) -> None:
    """Reject a pending draft with a reason."""
    with open_bot("reject") as bot:
        draft = bot.reject(draft_id, reason)
        console.print(f"[yellow]Rejected {draft.id}[/yellow]")


def edit(
    draft_id: str = typer.Argument(..., help="Draft id"),
    content: str = typer.Option(..., "--content", "-c", help="New content"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Editor notes"),
) -> None:
    """Replace a draft's content; it goes back to pending_review."""
    with open_bot("edit") as bot:
        draft = bot.edit(draft_id, content, editor_notes=notes)
        console.print(f"[green]Edited {draft.id}[/green] (now {draft.status})")


def regenerate(
    draft_id: str = typer.Argument(..., help="Draft id"),
    instruction: str = typer.Option("rewrite", "--instruction", "-i", help="shorten | expand | rewrite"),
) -> None:
    """Regenerate a draft from its original message."""
    with open_bot("regenerate") as bot:
        print_draft(bot.regenerate(draft_id, instruction))
