"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from figma_fetch import __version__
from figma_fetch.api.client import FigmaAPIClient
from figma_fetch.core.pipeline import FetchPipeline
from figma_fetch.exceptions import FigmaFetchError, ValidationError
from figma_fetch.media.downloader import Downloader, close_connection_pool
from figma_fetch.models.config import ACCESS_TOKEN_LENGTH, DEFAULT_OUTPUT_DIR
from figma_fetch.models.node import DownloadResult
from figma_fetch.storage.config_manager import TOKEN_ENV_VAR, ConfigManager
from figma_fetch.utils.path import parse_node_url, validate_node_url

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_download_result,
    print_node_reference,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
app = typer.Typer(
    name="figma-fetch",
    help=(
        "Render a Figma node to PNG and save it locally. Use 'figma-fetch"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)

URL_PROMPT = "Please provide the URL to the figma node that you'd like to fetch as an image?"
OUTPUT_DIR_PROMPT = "Where would you like to save the image to?"
CONFIRM_PROMPT = "Save image locally?"


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "figma-image-fetcher"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the effective configuration."
    ),
):
    """Figma Image Fetcher CLI"""
    if version:
        console.print(
            f"[bold]figma-image-fetcher[/bold] version [cyan]{__version__}[/cyan]"
        )
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("figma_fetch").setLevel(log_level)

    if show_config:
        try:
            config = ConfigManager(CONFIG_FILE).load_config()
        except FigmaFetchError as e:
            console.print(f"[red]✗ {e}[/red]")
            raise typer.Exit(code=1) from e
        print_config(CONFIG_FILE, config, console)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def _prompt_for_url() -> str:
    """Prompts until the user enters a URL that parses as a node reference."""
    while True:
        value = typer.prompt(URL_PROMPT).strip()
        message = validate_node_url(value)
        if message is None:
            return value
        console.print(f"[yellow]{message}[/yellow]")


def _prompt_for_output_dir(default: str) -> str:
    """Prompts until the user enters a non-blank directory."""
    while True:
        value = typer.prompt(OUTPUT_DIR_PROMPT, default=default).strip()
        if value:
            return value
        console.print("[yellow]Output directory cannot be empty.[/yellow]")


@app.command(name="fetch")
def fetch_command(
    url: str | None = typer.Argument(
        None, help="Figma node URL, e.g. https://www.figma.com/design/<file>/<name>?node-id=1-2"
    ),
    output_dir: str | None = typer.Option(
        None,
        "-o",
        "--output",
        help=f"Directory to save the image to (default: {DEFAULT_OUTPUT_DIR}).",
    ),
    confirm: bool | None = typer.Option(
        None,
        "--yes/--no",
        "-y/-n",
        help="Fetch without asking for confirmation (or skip the fetch).",
    ),
):
    """Fetch a single Figma node as a PNG image."""
    try:
        config = ConfigManager(CONFIG_FILE).load_config({"output_dir": output_dir})
    except FigmaFetchError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    interactive = confirm is None
    if url is None:
        url = _prompt_for_url()
    if output_dir is None and interactive:
        config.output_dir = _prompt_for_output_dir(config.output_dir)
    if interactive:
        confirm = typer.confirm(CONFIRM_PROMPT, default=False)

    if not confirm:
        console.print("[dim]Nothing fetched.[/dim]")
        raise typer.Exit()

    async def _fetch_async() -> DownloadResult:
        try:
            async with FigmaAPIClient(
                config.access_token,
                base_url=config.api_base_url,
                timeout=config.request_timeout,
            ) as client:
                pipeline = FetchPipeline(client, Downloader())
                return await pipeline.run(url, config.output_dir)
        finally:
            await close_connection_pool()

    try:
        with console.status(f"Fetching image from {url}"):
            result = asyncio.run(_fetch_async())
    except FigmaFetchError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    print_download_result(result, console)


@app.command(name="check-url")
def check_url(
    url: str = typer.Argument(..., help="Figma node URL to validate."),
):
    """Validate a node URL and show the file and node ids it refers to."""
    try:
        node_ref = parse_node_url(url)
    except ValidationError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    print_node_reference(node_ref, console)


@app.command()
def init(
    output_dir: str = typer.Option(
        DEFAULT_OUTPUT_DIR, "-o", "--output", help="Default directory for images."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config without asking."
    ),
):
    """Write a configuration file with default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_defaults({"output_dir": output_dir})
    except FigmaFetchError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print(
        f"The access token is read from [cyan]{TOKEN_ENV_VAR}[/cyan]; "
        "it is never stored in the config file."
    )


@app.command()
def diagnose():
    """Diagnose common configuration and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    config_manager = ConfigManager(CONFIG_FILE)

    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print(
            f"[yellow]•[/] No config file at [dim]{CONFIG_FILE}[/dim], using defaults."
        )

    token = config_manager.environ.get(TOKEN_ENV_VAR, "").strip()
    if not token:
        console.print(f"[red]✗ {TOKEN_ENV_VAR} is not set.[/red]")
        raise typer.Exit(code=1)
    if len(token) != ACCESS_TOKEN_LENGTH:
        console.print(
            f"[red]✗ {TOKEN_ENV_VAR} must be {ACCESS_TOKEN_LENGTH} characters, "
            f"got {len(token)}.[/red]"
        )
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/] {TOKEN_ENV_VAR} is set and well-formed.")

    try:
        config = config_manager.load_config()
    except FigmaFetchError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print("[green]✓[/] Configuration is valid.")

    console.print("\n[dim]Testing connectivity to the Figma API...[/dim]")

    async def test_connection() -> bool:
        async with FigmaAPIClient(
            config.access_token, base_url=config.api_base_url, timeout=10
        ) as client:
            try:
                user = await client.fetch_current_user()
            except FigmaFetchError as e:
                console.print(f"[red]✗ {e}[/red]")
                return False
        console.print(
            f"[green]✓[/] Authenticated as [cyan]{user.get('handle', 'unknown')}[/cyan]."
        )
        return True

    if not asyncio.run(test_connection()):
        console.print(
            "\n[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
    console.print("\n[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n")
