"""Replay of a previous exchange for continuation requests.

A continuation sends the parent entry's prompt as a user turn and its answer,
re-serialized in the same JSON shape the model is asked to produce, as the
assistant turn. The new prompt follows.
"""

import json
import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from tell.storage.history import HistoryEntry


logger = logging.getLogger(__name__)


def _escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def _format_manually(command: str, details: str, show_details: bool) -> str:
    """Build the JSON text by hand. Only used when json.dumps fails."""
    return (
        f'{{"command": "{_escape(str(command))}", '
        f'"details": "{_escape(str(details))}", '
        f'"show_details": {"true" if show_details else "false"}}}'
    )


def serialize_response(command: str, details: str, show_details: bool) -> str:
    """Serialize a command answer the way the model is instructed to emit it.

    Never raises: if structured encoding fails, a manually formatted
    object with the same three fields is returned instead.

    Args:
        command: Shell command
        details: Explanation text
        show_details: Whether details should be shown

    Returns:
        JSON object text with keys command, details and show_details
    """
    try:
        return json.dumps(
            {
                "command": command,
                "details": details,
                "show_details": show_details,
            },
            ensure_ascii=False,
        )
    except (TypeError, ValueError) as e:
        logger.warning(f"Falling back to manual serialization of previous response: {e}")
        return _format_manually(command, details, show_details)


def build_continuation_messages(parent: "HistoryEntry") -> list[dict]:
    """Rebuild the user/assistant exchange for a previous entry.

    Args:
        parent: A successful history entry

    Returns:
        Two messages: the parent's prompt and its serialized answer
    """
    return [
        {"role": "user", "content": parent.prompt},
        {
            "role": "assistant",
            "content": serialize_response(
                parent.command, parent.details, parent.show_details
            ),
        },
    ]


def build_messages(prompt: str, parent: Optional["HistoryEntry"] = None) -> list[dict]:
    """Build the full message sequence for a generation request.

    Args:
        prompt: The new natural-language request
        parent: Optional entry to continue from

    Returns:
        Message dicts ending with the new user prompt
    """
    messages = build_continuation_messages(parent) if parent is not None else []
    messages.append({"role": "user", "content": prompt})
    return messages
