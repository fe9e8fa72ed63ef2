"""Data types for shell command results.

This module contains the dataclasses shared by all shell command modules.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["CommandResult"]


@dataclass
class CommandResult:
    """Result of an external command.

    Attributes:
        success: Whether the command exited with status 0
        stdout: Captured standard output
        stderr: Captured standard error
        returncode: Process exit status
    """

    success: bool
    stdout: str
    stderr: str
    returncode: int

    @property
    def value(self) -> str:
        """Standard output with the trailing newline removed."""
        return self.stdout.rstrip("\n")
