"""Prompt registry: loads prompt templates from YAML, validates and caches them."""

import os
from pathlib import Path
from typing import Any

import yaml

from emailbot.config import PROMPTS_CONFIG_PATH
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.generation.registry")

REQUIRED_TEMPLATES = ("system_prompt", "generation_template", "regeneration_template")
REQUIRED_MODES = ("shorten", "expand", "rewrite")
LANGUAGES = ("en", "es")

_config: dict[str, Any] | None = None


def _get_config_path() -> Path:
    raw = os.environ.get("PROMPTS_CONFIG_PATH", "").strip()
    if raw:
        return Path(raw)
    return PROMPTS_CONFIG_PATH


def _load_config() -> dict[str, Any]:
    global _config
    if _config is not None:
        return _config
    path = _get_config_path()
    if not path.exists():
        raise FileNotFoundError(
            f"Prompts config not found: {path}. Set PROMPTS_CONFIG_PATH or create config/prompts.yaml."
        )
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in prompts config {path}: {e}") from e
    if not isinstance(loaded, dict):
        raise ValueError(f"Prompts config must be a YAML object (dict), got {type(loaded)}")
    validate_config(loaded)
    _config = loaded
    logger.info("prompt_registry.config_loaded", path=str(path))
    return _config


def validate_config(config: dict[str, Any]) -> None:
    """Fail fast on missing templates, instruction modes or language parity gaps."""
    for key in REQUIRED_TEMPLATES:
        value = config.get(key)
        if not value or not isinstance(value, str):
            raise ValueError(f"Prompts config missing required template {key!r}")
    modes = config.get("instruction_modes") or {}
    for mode in REQUIRED_MODES:
        if not modes.get(mode):
            raise ValueError(f"Prompts config missing instruction mode {mode!r}")
    notices = config.get("no_action_notice") or {}
    missing = [lang for lang in LANGUAGES if not notices.get(lang)]
    if missing:
        raise ValueError(f"Prompts config no_action_notice missing languages: {missing}")
    followups = config.get("followup_templates") or {}
    for lang in LANGUAGES:
        numbers = sorted((followups.get(lang) or {}).keys())
        if numbers != [1, 2, 3]:
            raise ValueError(f"Prompts config followup_templates.{lang} must define numbers 1, 2 and 3")


def reload_config() -> dict[str, Any]:
    """Force-reload config from disk."""
    global _config
    _config = None
    return _load_config()


def get_template(name: str) -> str:
    config = _load_config()
    template = config.get(name)
    if not isinstance(template, str):
        raise ValueError(f"Unknown prompt template {name!r}")
    return template


def get_mode_line(instruction: str | None) -> tuple[str, str]:
    """Fold a free-form instruction into (mode, line); unknown instructions become rewrite."""
    modes = _load_config().get("instruction_modes") or {}
    mode = str(instruction or "rewrite").strip().lower()
    if mode not in modes:
        mode = "rewrite"
    return mode, modes[mode]


def get_no_action_notice(lang: str) -> str:
    notices = _load_config().get("no_action_notice") or {}
    return notices.get(lang) or notices["en"]


def get_defaults() -> dict[str, Any]:
    return dict(_load_config().get("defaults") or {})


def get_followup_template(lang: str, number: int) -> str:
    templates = _load_config().get("followup_templates") or {}
    by_number = templates.get(lang) or templates["en"]
    return by_number[number]


def get_followup_defaults(lang: str) -> dict[str, str]:
    defaults = _load_config().get("followup_defaults") or {}
    return dict(defaults.get(lang) or defaults.get("en") or {})
