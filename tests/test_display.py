"""Test display utilities."""

import json
import logging
from datetime import datetime
from io import StringIO

import pytest
from unittest.mock import patch

from rich.console import Console
from rich.logging import RichHandler

from tell.config import TellConfig
from tell.providers.base import CommandResponse, UsageInfo
from tell.storage.history import HistoryEntry
from tell.utils.display import (
    configure_logging,
    console,
    err_console,
    print_command,
    print_command_json,
    print_config,
    print_error,
    print_history_entry,
    print_history_table,
    print_info,
    print_spinner_context,
    print_success,
    print_usage,
    print_warning,
)


def make_entry(**overrides):
    """Build a history entry for tests."""
    fields = {
        "id": 3,
        "timestamp": datetime(2024, 5, 1, 12, 30, 0),
        "prompt": "list files by size",
        "command": "du -h | sort -hr",
        "details": "sorts by size",
        "show_details": True,
    }
    fields.update(overrides)
    return HistoryEntry(**fields)


@pytest.fixture
def wide_console():
    """Swap in a wide, non-terminal console and return its buffer."""
    buffer = StringIO()
    with patch("tell.utils.display.console", Console(file=buffer, width=200)):
        yield buffer


def test_print_command_with_details():
    """Test that details follow the command when requested."""
    response = CommandResponse(command="du -h | sort -hr", details="sorts", show_details=True)

    with patch.object(console, 'print') as mock_print:
        print_command(response)

    printed = [call.args[0] for call in mock_print.call_args_list if call.args]
    assert printed == ["du -h | sort -hr", "sorts"]


def test_print_command_hides_details():
    """Test that details are skipped when not flagged or not wanted."""
    flagged_off = CommandResponse(command="ls", details="lists", show_details=False)
    flagged_on = CommandResponse(command="ls", details="lists", show_details=True)

    with patch.object(console, 'print') as mock_print:
        print_command(flagged_off)
        print_command(flagged_on, explain=False)

    assert mock_print.call_count == 2


def test_print_command_is_not_markup():
    """Test that brackets in commands are printed literally."""
    response = CommandResponse(command="echo [bold]hi[/bold]")

    with patch.object(console, 'print') as mock_print:
        print_command(response)

    assert mock_print.call_args.kwargs["markup"] is False


def test_print_command_json():
    """Test JSON output."""
    response = CommandResponse(command="ls", details="lists", show_details=True)

    with patch.object(console, 'print') as mock_print:
        print_command_json(response)

    assert json.loads(mock_print.call_args.args[0]) == {
        "command": "ls",
        "details": "lists",
        "show_details": True,
    }


def test_print_usage():
    """Test usage goes to stderr."""
    usage = UsageInfo(model="claude-3-haiku-20240307", input_tokens=10, output_tokens=5)

    with patch.object(err_console, 'print') as mock_print:
        print_usage(usage)

    output = " ".join(str(call) for call in mock_print.call_args_list)
    assert "claude-3-haiku-20240307" in output
    assert "input=10" in output
    assert "output=5" in output


def test_print_error():
    """Test error printing."""
    with patch.object(err_console, 'print') as mock_print:
        print_error("Test error message")
        mock_print.assert_called_once()


def test_print_success():
    """Test success message."""
    with patch.object(console, 'print') as mock_print:
        print_success("Operation successful")
        mock_print.assert_called_once()
        assert "Operation successful" in str(mock_print.call_args)


def test_print_warning():
    """Test warning message."""
    with patch.object(err_console, 'print') as mock_print:
        print_warning("Warning message")
        mock_print.assert_called_once()
        assert "Warning message" in str(mock_print.call_args)


def test_print_info():
    """Test info message."""
    with patch.object(console, 'print') as mock_print:
        print_info("Info message")
        mock_print.assert_called_once()
        assert "Info message" in str(mock_print.call_args)


def test_print_history_table_empty():
    """Test the empty history message."""
    with patch.object(console, 'print') as mock_print:
        print_history_table([])

    assert "No history entries found." in str(mock_print.call_args)


def test_print_history_table(wide_console):
    """Test that a table is printed for entries."""
    entries = [
        make_entry(),
        make_entry(id=4, favorite=True, parent_id=3),
        make_entry(id=5, command="", error_message="API error"),
    ]

    print_history_table(entries)

    output = wide_console.getvalue()
    assert "Command History" in output
    assert "du -h | sort -hr" in output
    assert "↳ 3" in output
    assert "API error" in output


def test_print_history_entry(wide_console):
    """Test single entry display."""
    print_history_entry(make_entry(parent_id=2, input_tokens=12))

    output = wide_console.getvalue()
    assert "History Entry 3" in output
    assert "Continues from" in output
    assert "du -h | sort -hr" in output
    assert "12" in output


def test_print_config_masks_key(wide_console):
    """Test that the API key is never printed in full."""
    config = TellConfig(anthropic_api_key="sk-ant-1234567890wxyz")

    print_config(config)

    output = wide_console.getvalue()
    assert "sk-a...wxyz" in output
    assert "sk-ant-1234567890wxyz" not in output


def test_configure_logging_levels():
    """Test that verbose switches the root logger to DEBUG."""
    root = logging.getLogger()
    original_level = root.level
    original_handlers = list(root.handlers)
    try:
        configure_logging(TellConfig(verbose=True))
        assert root.level == logging.DEBUG

        configure_logging(TellConfig(verbose=False))
        assert root.level == logging.WARNING

        rich_handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
    finally:
        root.handlers = original_handlers
        root.setLevel(original_level)


def test_print_spinner_context_off_terminal():
    """Test that no spinner is drawn when stderr is not a terminal."""
    with patch.object(type(err_console), "is_terminal", new=False):
        with print_spinner_context("Working..."):
            pass
