"""Command-line interface for TELL using Typer."""

import asyncio
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import click
import typer
import yaml
from pydantic import ValidationError
from rich.markup import escape

from tell import __version__
from tell.config import TellConfig
from tell.core.generator import CommandGenerator
from tell.exceptions import StorageError, TellError
from tell.storage.history import HistoryEntry, HistoryStore
from tell.utils import display

app = typer.Typer(
    name="tell",
    help="TELL: Convert English to shell commands",
    add_completion=False,
)
history_app = typer.Typer(help="Show and manage command history")
config_app = typer.Typer(help="Configuration management")
app.add_typer(history_app, name="history")
app.add_typer(config_app, name="config")

logger = logging.getLogger(__name__)

STORAGE_UNAVAILABLE = "History storage is unavailable. Run with --verbose for details."


def _user_message(error: TellError) -> str:
    """Message shown to the user for an error; storage internals stay in the log."""
    if isinstance(error, StorageError):
        return STORAGE_UNAVAILABLE
    return error.message


def _open_store(config: TellConfig) -> Optional[HistoryStore]:
    """Open history for logging; generation still works without it."""
    try:
        return HistoryStore(config)
    except StorageError as e:
        logger.error(f"Failed to initialize database: {e}")
        return None


def _default_config(path: Path) -> TellConfig:
    """Default settings to write to a new config file, without env secrets.

    The key is left unset so it is omitted from the file and later loads
    still pick it up from the environment.
    """
    return TellConfig(config_path=path, anthropic_api_key=None)


def _announce_parent(parent: HistoryEntry) -> None:
    """Tell the user which command is being continued, on stderr."""
    display.print_warning(f"Continuing from previous command: {escape(parent.command)}")


@contextmanager
def _history_store(config: TellConfig) -> Iterator[HistoryStore]:
    """Open history for a direct history operation, reporting failures."""
    try:
        store = HistoryStore(config)
    except StorageError as e:
        logger.debug(f"Failed to initialize database: {e}")
        display.print_error(STORAGE_UNAVAILABLE)
        raise typer.Exit(code=1)

    try:
        yield store
    except TellError as e:
        logger.debug(f"History operation failed: {e}")
        display.print_error(_user_message(e))
        raise typer.Exit(code=1)
    finally:
        store.close()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        display.console.print(f"tell version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging to stderr"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        envvar="TELL_CONFIG",
        help="Path to the YAML configuration file"
    ),
):
    """TELL - Terminal English Language Liaison."""
    try:
        config = TellConfig.load_from_file(config_file)
    except (yaml.YAMLError, ValidationError) as e:
        display.print_error(f"Could not load configuration: {e}")
        raise typer.Exit(code=1)

    if verbose:
        config.verbose = True

    display.configure_logging(config)
    ctx.obj = config


@app.command(name="prompt")
def prompt_command(
    ctx: typer.Context,
    text: List[str] = typer.Argument(
        ...,
        help="What you want to do, in plain language"
    ),
    output_format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: text or json"
    ),
    no_explain: bool = typer.Option(
        False,
        "--no-explain",
        "-n",
        help="Skip command explanation"
    ),
    continue_conversation: bool = typer.Option(
        False,
        "--continue",
        "-c",
        help="Continue from the most recent successful command"
    ),
    include_context: bool = typer.Option(
        False,
        "--context",
        help="Describe the current directory to the model"
    ),
):
    """Convert natural language to a shell command.

    Examples:
        tell prompt list files by size
        tell prompt --format json find all pdf files
        tell prompt -c but only in the current directory
    """
    config: TellConfig = ctx.obj

    if output_format not in ("text", "json"):
        display.print_error(f"Invalid format: {output_format}. Use text or json.")
        raise typer.Exit(code=1)

    prompt = " ".join(text)
    store = _open_store(config)
    generator = CommandGenerator(config=config, store=store)

    try:
        with display.print_spinner_context("Generating command..."):
            result = asyncio.run(
                generator.generate(
                    prompt,
                    continue_conversation=continue_conversation,
                    include_context=include_context,
                    on_parent=_announce_parent,
                )
            )
    except TellError as e:
        display.print_error(_user_message(e))
        raise typer.Exit(code=1)
    finally:
        if store is not None:
            store.close()

    if config.verbose:
        display.print_usage(result.usage)

    if output_format == "json":
        display.print_command_json(result.response)
    else:
        display.print_command(result.response, explain=not no_explain)


@history_app.callback(invoke_without_command=True)
def history_callback(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-l",
        min=1,
        help="Maximum number of entries to show"
    ),
    favorites: bool = typer.Option(
        False,
        "--favorites",
        "-f",
        help="Show only favorite entries"
    ),
):
    """Show command history.

    Examples:
        tell history
        tell history --limit 20
        tell history --favorites
    """
    if ctx.invoked_subcommand is not None:
        return

    config: TellConfig = ctx.obj
    with _history_store(config) as store:
        entries = store.list(
            limit=limit or config.history_limit,
            favorites_only=favorites,
        )
        total = store.count(favorites_only=favorites)

    title = "Favorite Commands" if favorites else "Command History"
    display.print_history_table(entries, title=title)
    if entries:
        display.console.print(f"[dim]Showing {len(entries)} of {total} entries[/dim]")


@history_app.command(name="search")
def history_search(
    ctx: typer.Context,
    query: str = typer.Argument(
        ...,
        help="Text to find in prompts or commands (case-sensitive)"
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-l",
        min=1,
        help="Maximum number of results to return"
    ),
):
    """Search history by prompt or command text.

    Examples:
        tell history search pdf
        tell history search "git log" --limit 5
    """
    config: TellConfig = ctx.obj
    with _history_store(config) as store:
        entries = store.search(query, limit=limit or config.history_limit)

    display.print_history_table(entries, title=f'History matching: "{escape(query)}"')


@history_app.command(name="show")
def history_show(
    ctx: typer.Context,
    entry_id: int = typer.Argument(..., help="History entry ID"),
):
    """Show complete details of a history entry."""
    config: TellConfig = ctx.obj
    with _history_store(config) as store:
        entry = store.get(entry_id)

    display.print_history_entry(entry)


@history_app.command(name="favorite")
def history_favorite(
    ctx: typer.Context,
    entry_id: int = typer.Argument(..., help="History entry ID"),
):
    """Toggle the favorite status of a history entry."""
    config: TellConfig = ctx.obj
    with _history_store(config) as store:
        favorite = store.toggle_favorite(entry_id)

    if favorite:
        display.print_success(f"Entry {entry_id} marked as favorite.")
    else:
        display.print_success(f"Entry {entry_id} unmarked as favorite.")


@history_app.command(name="delete")
def history_delete(
    ctx: typer.Context,
    entry_id: int = typer.Argument(..., help="History entry ID"),
):
    """Delete a history entry."""
    config: TellConfig = ctx.obj
    with _history_store(config) as store:
        store.delete(entry_id)

    display.print_success(f"Entry {entry_id} deleted.")


@config_app.command(name="show")
def config_show(ctx: typer.Context):
    """Show current configuration with the API key masked."""
    display.print_config(ctx.obj)


@config_app.command(name="init")
def config_init(
    ctx: typer.Context,
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing configuration file"
    ),
):
    """Create a default configuration file."""
    config: TellConfig = ctx.obj
    path = Path(config.config_path)

    if path.exists() and not force:
        display.print_error(f"Configuration already exists at {path}. Use --force to overwrite.")
        raise typer.Exit(code=1)

    _default_config(path).save_to_file()
    display.print_success(f"Created default configuration at {path}")


@config_app.command(name="edit")
def config_edit(ctx: typer.Context):
    """Open the configuration file in $EDITOR."""
    config: TellConfig = ctx.obj
    path = Path(config.config_path)

    if not path.exists():
        logger.info("Config file doesn't exist, creating default")
        _default_config(path).save_to_file()

    click.edit(filename=str(path))
    display.print_success(f"Configuration saved at {path}")
