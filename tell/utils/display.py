"""Rich console display helpers for TELL.

Generated commands go to stdout so shell integrations can capture them;
everything else (errors, status, usage) goes to stderr.
"""

import json
import logging
from contextlib import nullcontext

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tell.config import TellConfig
from tell.providers.base import CommandResponse, UsageInfo
from tell.storage.history import HistoryEntry


# Global console instances
console = Console()
err_console = Console(stderr=True)


def configure_logging(config: TellConfig) -> None:
    """Install a Rich log handler on stderr.

    Args:
        config: TellConfig; verbose enables DEBUG level, otherwise only
            warnings and errors are shown
    """
    level = logging.DEBUG if config.verbose else logging.WARNING
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    root.addHandler(
        RichHandler(console=err_console, show_path=False, rich_tracebacks=False)
    )
    root.setLevel(level)


def print_command(response: CommandResponse, explain: bool = True) -> None:
    """Print a generated command in plain text.

    Args:
        response: CommandResponse to display
        explain: Print details after the command when the model asked for it
    """
    console.print(response.command, markup=False, highlight=False, soft_wrap=True)
    if explain and response.show_details and response.details:
        console.print()
        console.print(response.details, markup=False, highlight=False, soft_wrap=True)


def print_command_json(response: CommandResponse) -> None:
    """Print a generated command as a JSON object."""
    console.print(
        json.dumps(response.model_dump()),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def print_usage(usage: UsageInfo) -> None:
    """Display model and token usage on stderr."""
    err_console.print(f"[dim]Model: {usage.model}[/dim]")
    err_console.print(
        f"[dim]Tokens used: input={usage.input_tokens}, "
        f"output={usage.output_tokens}[/dim]"
    )


def print_error(message: str, title: str = "Error") -> None:
    """Display error message.

    Args:
        message: Error message to display
        title: Panel title
    """
    err_console.print(
        Panel(
            f"[red]{escape(message)}[/red]",
            title=f"[bold red]{title}[/bold red]",
            border_style="red"
        )
    )


def print_success(message: str) -> None:
    """Display success message."""
    console.print(f"[green]✓[/green] {message}")


def print_warning(message: str) -> None:
    """Display warning message."""
    err_console.print(f"[yellow]⚠[/yellow] {message}")


def print_info(message: str) -> None:
    """Display info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def _truncate(text: str, width: int) -> str:
    return text[:width - 3] + "..." if len(text) > width else text


def print_history_table(entries: list[HistoryEntry], title: str = "Command History") -> None:
    """Display history entries in a table.

    Args:
        entries: Entries to display, newest first
        title: Table title
    """
    if not entries:
        print_info("No history entries found.")
        return

    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", width=6)
    table.add_column("Date", style="dim", width=19)
    table.add_column("Prompt", width=30)
    table.add_column("Command", style="cyan", width=40)
    table.add_column("", width=12)

    for entry in entries:
        flags = []
        if entry.favorite:
            flags.append("⭐")
        if entry.parent_id is not None:
            flags.append(f"↳ {entry.parent_id}")

        if entry.failed:
            command = f"[red]✗ {escape(_truncate(entry.error_message, 38))}[/red]"
        else:
            command = escape(_truncate(entry.command, 40))

        table.add_row(
            str(entry.id),
            entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            escape(_truncate(entry.prompt, 30)),
            command,
            " ".join(flags),
        )

    console.print(table)


def print_history_entry(entry: HistoryEntry) -> None:
    """Display complete details of a single history entry."""
    lines = [
        f"[bold]ID:[/bold] {entry.id}",
        f"[bold]Time:[/bold] {entry.timestamp.strftime('%a, %d %b %Y %H:%M:%S')}",
        f"[bold]Favorite:[/bold] {'yes' if entry.favorite else 'no'}",
    ]

    if entry.parent_id is not None:
        lines.append(f"[bold]Continues from:[/bold] {entry.parent_id}")

    lines.append(f"[bold]Model:[/bold] {entry.model or '-'}")
    lines.append(f"[bold]Input Tokens:[/bold] {entry.input_tokens}")
    lines.append(f"[bold]Output Tokens:[/bold] {entry.output_tokens}")
    lines.append("")
    lines.append(f"[bold]Prompt:[/bold] {escape(entry.prompt)}")
    lines.append("")
    lines.append(f"[bold]Command:[/bold]\n[cyan]{escape(entry.command) or '-'}[/cyan]")

    if entry.details:
        lines.append("")
        lines.append(f"[bold]Details:[/bold] {escape(entry.details)}")

    if entry.error_message:
        lines.append("")
        lines.append(f"[bold red]Error:[/bold red] {escape(entry.error_message)}")

    console.print(
        Panel(
            "\n".join(lines),
            title=f"[bold]History Entry {entry.id}[/bold]",
            border_style="red" if entry.failed else "blue",
            padding=(1, 2)
        )
    )


def print_config(config: TellConfig) -> None:
    """Display configuration with the API key masked."""
    print_info("Current Configuration:")
    console.print(f"  Anthropic API Key: [cyan]{config.masked_api_key()}[/cyan]")
    console.print(f"  LLM Model: [cyan]{config.llm_model}[/cyan]")
    console.print(f"  Max Tokens: [cyan]{config.max_tokens}[/cyan]")
    console.print(f"  Config File: [cyan]{config.config_path}[/cyan]")
    console.print(f"  History Database: [cyan]{config.db_path}[/cyan]")

    console.print("  Preferred Commands:")
    for command in config.preferred_commands:
        console.print(f"    - {escape(command)}")

    console.print("  Extra Instructions:")
    for instruction in config.extra_instructions:
        console.print(f"    - {escape(instruction)}")


def print_spinner_context(message: str):
    """Create a spinner context for long-running operations.

    Args:
        message: Message to display with spinner

    Returns:
        Rich status context manager, or a no-op context when stderr is
        not a terminal
    """
    if not err_console.is_terminal:
        return nullcontext()
    return err_console.status(message, spinner="dots")
