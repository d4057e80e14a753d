"""System prompt construction for command generation."""

import os
from pathlib import Path
from typing import Optional

from tell.config import TellConfig


INTRODUCTION = """You are TELL (Terminal English Language Liaison), an expert in Unix/Linux command line tools.
Your task is to convert natural language requests into shell commands.

"""

FORMATTING_GUIDELINES = """Command formatting guidelines:
- Use backslashes (\\) to break long commands into multiple lines for readability
- Include proper quoting for filenames and variables
- Prefer safe commands that won't accidentally destroy data
- Use modern alternatives to legacy commands when appropriate

"""

OUTPUT_FORMAT = """OUTPUT FORMAT:
Respond with a single JSON object and nothing else, no markdown:
{
  "command": "the exact command to run",
  "show_details": true or false, whether the explanation is worth showing,
  "details": "a brief explanation of what the command does"
}
"""


def gather_directory_context(path: Optional[Path] = None) -> str:
    """Describe the working directory and its entries.

    Args:
        path: Directory to describe, defaults to the current directory

    Returns:
        Multi-line description; unreadable entries are listed by name only
    """
    directory = Path(path) if path is not None else Path.cwd()
    lines = [f"Current directory: {directory}"]

    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        return "\n".join(lines) + "\n"

    lines.append("Directory contents:")
    for entry in entries:
        try:
            kind = "dir" if entry.is_dir() else "file"
            size = entry.stat().st_size
        except OSError:
            lines.append(f"- {entry.name}")
            continue
        lines.append(f"- {entry.name} ({kind}, {size} bytes)")

    return "\n".join(lines) + "\n"


def build_system_prompt(
    config: TellConfig,
    include_context: bool = False,
    context_path: Optional[Path] = None,
) -> str:
    """Build the system prompt for the LLM.

    Args:
        config: TellConfig with preferred commands and extra instructions
        include_context: Append a listing of the working directory
        context_path: Directory to describe when include_context is set

    Returns:
        System prompt string
    """
    parts = [INTRODUCTION]

    if config.preferred_commands:
        parts.append(f"Preferred commands: {', '.join(config.preferred_commands)}\n\n")

    if config.extra_instructions:
        parts.append("Additional guidelines:\n")
        parts.extend(f"- {instruction}\n" for instruction in config.extra_instructions)
        parts.append("\n")

    parts.append(FORMATTING_GUIDELINES)
    parts.append(OUTPUT_FORMAT)

    if include_context:
        parts.append("\nCurrent directory context:\n")
        parts.append(gather_directory_context(context_path))

    return "".join(parts)
