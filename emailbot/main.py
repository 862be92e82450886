"""Entry point: delegates to the Typer CLI app."""

from rich.traceback import install

from emailbot.cli import app
from emailbot.utils.tracing import shutdown_tracing


def main() -> None:
    try:
        install(show_locals=False, max_frames=5, word_wrap=True)
        app()
    finally:
        shutdown_tracing()


if __name__ == "__main__":
    main()
