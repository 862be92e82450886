"""Pydantic AI backed text generation."""

from typing import Any

from pydantic_ai import Agent

from emailbot.errors import GenerationFailure
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.generation.agent")


def create_agent(model: str, system_prompt: str, **kwargs) -> Agent:
    """Create a plain-text Pydantic AI agent with shared settings."""
    return Agent(
        model,
        output_type=str,
        system_prompt=system_prompt,
        retries=1,
        **kwargs,
    )


class AgentGenerator:
    """Wraps a Pydantic AI Agent; the agent is built on first use so construction needs no API key."""

    def __init__(
        self,
        model: str,
        system_prompt: str,
        model_settings: dict[str, Any] | None = None,
        agent: Agent | None = None,
    ):
        self._model = model
        self._system_prompt = system_prompt
        self._model_settings = dict(model_settings or {})
        self._agent = agent

    def _get_agent(self) -> Agent:
        if self._agent is None:
            self._agent = create_agent(self._model, self._system_prompt)
        return self._agent

    def generate(self, prompt: str, timeout_seconds: float) -> str:
        settings = {**self._model_settings, "timeout": timeout_seconds}
        try:
            result = self._get_agent().run_sync(prompt, model_settings=settings)
        except Exception as e:
            logger.error("agent_generator.failed", model=self._model, error=str(e))
            raise GenerationFailure(f"Model call failed: {e}") from e
        text = str(result.output or "").strip()
        if not text:
            logger.error("agent_generator.empty_content", model=self._model)
            raise GenerationFailure("Model returned empty content")
        return text
