"""Entry point for running TELL as a module.

Usage:
    python -m tell prompt "list files by size"
    python -m tell --help
"""

from tell.cli import app

if __name__ == "__main__":
    app()
