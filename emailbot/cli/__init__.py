"""CLI commands, grouped by area (drafts, pipeline, follow-ups)."""

from typer import Typer

from emailbot.cli import drafts, followups, pipeline, validate_config as validate_config_module
from emailbot.utils.tracing import init_tracing

init_tracing()

app = Typer(help="Sales-lead email triage and reply drafting")


def register_commands() -> None:
    """Register all CLI commands on the global app."""
    app.command()(pipeline.ingest)
    app.command(name="list")(drafts.list_drafts)
    app.command()(drafts.show)
    app.command()(drafts.approve)
    app.command()(drafts.reject)
    app.command()(drafts.edit)
    app.command()(drafts.regenerate)
    app.command()(pipeline.send)
    app.command()(pipeline.metrics)
    app.command()(followups.followups)
    app.command()(followups.followup)
    app.command(name="send-followup")(followups.send_followup)
    app.command()(pipeline.sync)
    app.command(name="validate-config")(validate_config_module.validate_config)


register_commands()
