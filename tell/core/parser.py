"""Structured-output parsing for model replies.

The model is asked to answer with a single JSON object::

    {"command": "...", "show_details": false, "details": "..."}

Replies often wrap that object in prose or markdown fences, so the payload is
taken to be everything from the first ``{`` to the last ``}``. Anything short
of a well-formed object with a non-empty ``command`` is rejected; a malformed
reply must never be mistaken for a command to run.
"""

import json
import logging

from tell.exceptions import ParseError
from tell.providers.base import CommandResponse


logger = logging.getLogger(__name__)


def extract_json_span(text: str) -> str:
    """Return the substring between the first '{' and the last '}'.

    Args:
        text: Raw model output

    Returns:
        The candidate JSON payload, braces included

    Raises:
        ParseError: If the text holds no '{...}' span
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ParseError("No JSON object found in model response")
    return text[start:end + 1]


def parse_command_response(text: str) -> CommandResponse:
    """Parse raw model output into a CommandResponse.

    Args:
        text: Concatenated text content of the model's reply

    Returns:
        CommandResponse with defaults applied for missing optional keys

    Raises:
        ParseError: If no JSON object is found, the object is invalid, or
            the command is missing or blank
    """
    if not text:
        raise ParseError("Empty model response")

    payload = extract_json_span(text)

    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, RecursionError) as e:
        # RecursionError: nesting deeper than the decoder can follow
        logger.debug(f"Invalid JSON payload from model: {payload[:200]!r}")
        raise ParseError(f"Model response is not valid JSON: {e}", cause=e) from e

    if not isinstance(data, dict):
        raise ParseError("Model response JSON is not an object")

    command = data.get("command")
    if not isinstance(command, str) or not command.strip():
        raise ParseError("Model response is missing a command")

    details = data.get("details", "")
    if details is None:
        details = ""
    if not isinstance(details, str):
        raise ParseError("Model response 'details' must be a string")

    show_details = data.get("show_details", False)
    if not isinstance(show_details, bool):
        raise ParseError("Model response 'show_details' must be a boolean")

    response = CommandResponse(
        command=command,
        details=details,
        show_details=show_details,
    )
    logger.debug(
        f"Parsed command response: command_length={len(response.command)}, "
        f"details_length={len(response.details)}"
    )
    return response
