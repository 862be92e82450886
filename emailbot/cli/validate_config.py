"""Validate the prompts config and print a summary table."""

from rich.table import Table

from emailbot.generation import registry

from .shared import console, logger


def validate_config() -> None:
    """Load config/prompts.yaml, validate it, print a summary."""
    log = logger.bind(command="validate-config")
    try:
        config = registry.reload_config()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Config error: {e}[/red]")
        log.error("validate_config.fail", error=str(e))
        raise SystemExit(1) from e

    table = Table(title="Prompts config")
    table.add_column("Entry", style="cyan")
    table.add_column("Detail")
    for name in registry.REQUIRED_TEMPLATES:
        table.add_row(name, f"{len(config[name])} chars")
    table.add_row("instruction_modes", ", ".join(sorted(config["instruction_modes"])))
    table.add_row("no_action_notice", ", ".join(sorted(config["no_action_notice"])))
    table.add_row("followup_templates", ", ".join(sorted(config["followup_templates"])))
    console.print(table)
    log.info("validate_config.ok")
