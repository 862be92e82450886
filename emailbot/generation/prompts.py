"""Prompt construction for first-pass generation and regeneration."""

import re
from typing import Optional

from emailbot.generation import registry
from emailbot.language import language_name

CONTACT_FORM_MARKER = "You have received a new message from your website contact form"

_FORM_FIELDS = (
    ("Name", re.compile(r"Name:\s*([^\n]+)")),
    ("Company", re.compile(r"Company:\s*([^\n]+)")),
    ("Email", re.compile(r"Email:\s*([^\n]+)")),
    ("Phone", re.compile(r"Phone:\s*([^\n]+)")),
    ("Interested in", re.compile(r"Interested in:\s*([^\n]+)")),
)
_FORM_MESSAGE = re.compile(r"Message:\s*([\s\S]+?)(?:--|$)")


def format_original_message(message: Optional[str]) -> str:
    """Re-flow contact-form submissions into a labeled field block; other mail is returned trimmed."""
    if not message:
        return "No content"
    if CONTACT_FORM_MARKER not in message:
        return message.strip()

    lines = ["=== CONTACT FORM SUBMISSION ===", ""]
    for label, pattern in _FORM_FIELDS:
        match = pattern.search(message)
        if match and match.group(1).strip():
            lines.append(f"{label}: {match.group(1).strip()}")
    body = _FORM_MESSAGE.search(message)
    if body and body.group(1).strip():
        lines.extend(["", "Message:", body.group(1).strip()])
    lines.extend(["", "==============================="])
    return "\n".join(lines)


def build_generation_prompt(original_message: str, lang: str) -> str:
    body = registry.get_template("generation_template").format(
        language_name=language_name(lang),
        formatted_message=format_original_message(original_message),
    )
    return f"{registry.get_template('system_prompt').strip()}\n\n{body}"


def build_regeneration_prompt(
    original_message: str,
    previous_draft: str,
    lang: str,
    instruction: Optional[str],
    customer_name: Optional[str] = None,
    company: Optional[str] = None,
) -> tuple[str, str]:
    """Return (mode, prompt). The previous draft is context only; the original message drives the reply."""
    mode, mode_line = registry.get_mode_line(instruction)
    prompt = registry.get_template("regeneration_template").format(
        system_prompt=registry.get_template("system_prompt").strip(),
        language_name=language_name(lang),
        customer_name=customer_name or "",
        company=company or "",
        original_message=original_message,
        previous_draft=previous_draft,
        mode_line=mode_line,
    )
    return mode, prompt
