"""Text-generation service protocol."""

from typing import Protocol


class TextGenerator(Protocol):
    """Synchronous text generation with a bounded timeout.

    Implementations raise GenerationFailure for network errors, timeouts,
    empty output and truncated (non-stop) completions.
    """

    def generate(self, prompt: str, timeout_seconds: float) -> str:
        ...
