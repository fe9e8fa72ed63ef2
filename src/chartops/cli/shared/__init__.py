"""Console output and error handling shared by every command."""

from .console import CLIConsole, console, with_error_handling

__all__ = ["CLIConsole", "console", "with_error_handling"]
