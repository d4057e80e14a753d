"""TELL - Terminal English Language Liaison.

A CLI tool that converts plain language requests into shell commands using an
LLM, and keeps a searchable local history of every request.
"""

__version__ = "0.1.0"
__author__ = "TELL Team"
__license__ = "MIT"

__all__ = ["__version__", "__author__", "__license__"]
