"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from figma_fetch.exceptions import PipelineError
from figma_fetch.models.config import FetchConfig
from figma_fetch.models.node import DownloadResult, NodeReference
from figma_fetch.utils.formatting import format_size, mask_token

SUGGESTIONS_MAP = {
    "ValidationError": [
        "• Copy the link from Figma with 'Copy link to selection'.",
        "• The URL must look like https://www.figma.com/design/<file>/<name>?node-id=1-2",
    ],
    "LocatorError": [
        "• Check that the node still exists in the file.",
        "• Some node types (e.g. empty groups) cannot be rendered.",
        "• Make sure your token has access to the file.",
    ],
    "DownloadError": [
        "• Check that the output directory is writable.",
        "• A network connection issue may have interrupted the download.",
    ],
    "ConfigurationError": [
        "• Set FIGMA_PERSONAL_ACCESS_TOKEN to a valid 45-character token.",
        "• Run `figma-fetch diagnose` to check your setup.",
    ],
}


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    # Suggestions follow the stage error, not the wrapper.
    lookup_type = error_type
    if isinstance(error, PipelineError):
        lookup_type = type(error.error).__name__
        context = {**(context or {}), "stage": error.stage}

    suggestions = SUGGESTIONS_MAP.get(
        lookup_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_node_reference(node_ref: NodeReference, console: Console | None = None):
    """Displays the components parsed out of a node URL."""
    console = console or Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("File ID:", node_ref.file_id)
    table.add_row("Node ID:", node_ref.node_id)
    table.add_row("API Node ID:", f"[dim]{node_ref.api_node_id}[/dim]")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Valid Figma node URL[/bold green]",
            border_style="green",
            expand=False,
        )
    )


def print_download_result(result: DownloadResult, console: Console | None = None):
    """Displays where the image was written."""
    console = console or Console()
    console.print(
        f"[green]✓ Saved image to[/green] [cyan]{result.saved_path}[/cyan] "
        f"[dim]({format_size(result.bytes_written)})[/dim]"
    )


def print_config(
    config_path: Path, config: FetchConfig, console: Console | None = None
):
    """Displays the effective configuration, masking the access token."""
    console = console or Console()
    content = "\n".join(
        [
            f"access_token = {mask_token(config.access_token)}",
            f"api_base_url = {config.api_base_url}",
            f"request_timeout = {config.request_timeout}",
            f"output_dir = {config.output_dir}",
        ]
    )
    console.print(
        Panel(
            content,
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )
