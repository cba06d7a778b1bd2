"""
Process entry point for figma-image-fetcher.

Runs the Typer app outside click's standalone mode so that cancellation,
usage errors and application errors are all reported here.
"""

import logging
import sys

import click
import typer
from rich.console import Console

from figma_fetch.cli.app import app
from figma_fetch.cli.formatters import format_error_with_suggestions
from figma_fetch.exceptions import FigmaFetchError

CANCELLED_MESSAGE = "Operation cancelled."


def main() -> None:
    """Main entry point function."""
    console = Console()

    try:
        exit_code = app(standalone_mode=False)
    except typer.Abort:
        # click converts Ctrl-C and EOF at a prompt into Abort.
        console.print(f"\n[yellow]{CANCELLED_MESSAGE}[/yellow]")
        sys.exit(0)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except FigmaFetchError as e:
        console.print(format_error_with_suggestions(e))
        sys.exit(1)
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        logging.getLogger("figma_fetch").debug("Full traceback:", exc_info=True)
        sys.exit(1)

    sys.exit(exit_code or 0)


if __name__ == "__main__":
    main()
