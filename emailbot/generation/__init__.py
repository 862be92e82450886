"""Text generation backends, prompt registry and prompt builders."""

from emailbot.config import Settings
from emailbot.generation import registry
from emailbot.generation.agent import AgentGenerator
from emailbot.generation.gemini import GeminiGenerator
from emailbot.generation.prompts import (
    build_generation_prompt,
    build_regeneration_prompt,
    format_original_message,
)
from emailbot.generation.protocol import TextGenerator


def create_generator(settings: Settings) -> TextGenerator:
    """Pick the generation backend named in settings (gemini | agent)."""
    defaults = registry.get_defaults()
    if settings.generation_backend == "agent":
        model_settings = {
            key: defaults[key]
            for key in ("temperature", "top_p")
            if key in defaults
        }
        if "max_output_tokens" in defaults:
            model_settings["max_tokens"] = defaults["max_output_tokens"]
        return AgentGenerator(
            model=settings.agent_model,
            system_prompt=registry.get_template("system_prompt"),
            model_settings=model_settings,
        )
    return GeminiGenerator(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        generation_config={
            "temperature": defaults.get("temperature", 0.4),
            "topP": defaults.get("top_p", 0.95),
            "maxOutputTokens": defaults.get("max_output_tokens", 5000),
        },
    )


__all__ = [
    "AgentGenerator",
    "GeminiGenerator",
    "TextGenerator",
    "build_generation_prompt",
    "build_regeneration_prompt",
    "create_generator",
    "format_original_message",
    "registry",
]
