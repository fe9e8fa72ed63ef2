"""Command runner for executing shell commands.

This module provides the base command execution functionality used by
all specialized command modules.
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from loguru import logger

from ..errors import ExternalCommandError, MissingDependencyError
from .types import CommandResult


class CommandRunner:
    """Low-level command executor with consistent result handling.

    This class provides the foundation for executing external tools with
    proper output capture and error handling. A non-zero exit status is
    always fatal unless the caller explicitly asks for ``check=False``.

    All specialized command modules (Helm, kubectl, ECR) use this runner
    for actual command execution.
    """

    def __init__(
        self,
        project_root: Path,
        *,
        debug: bool = False,
        echo: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the command runner.

        Args:
            project_root: Path to the project root directory.
                         Commands will be executed from this directory by default.
            debug: Echo every command line before executing it
            echo: Callback receiving the echoed command line (defaults to print)
        """
        self.project_root = project_root
        self.debug = debug
        self._echo = echo or print

    def echo_command(self, cmd: Sequence[str]) -> None:
        """Echo a command line when debug mode is enabled."""
        line = shlex.join(cmd)
        logger.debug("exec: {}", line)
        if self.debug:
            self._echo(f"$ {line}")

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
    ) -> CommandResult:
        """Execute a command and return structured result.

        Args:
            cmd: Command and arguments as a sequence
            cwd: Working directory (defaults to project_root)
            env: Extra environment variables merged over os.environ
            check: Whether to raise on non-zero exit code

        Returns:
            CommandResult with success status, output, and return code

        Raises:
            MissingDependencyError: If the executable is not on PATH
            ExternalCommandError: If check=True and the command fails
        """
        self.echo_command(cmd)
        try:
            result = subprocess.run(
                list(cmd),
                cwd=cwd or self.project_root,
                capture_output=True,
                text=True,
                env={**os.environ, **env} if env else None,
            )
        except FileNotFoundError as e:
            raise MissingDependencyError(cmd[0]) from e

        command_result = CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )
        if check and not command_result.success:
            raise ExternalCommandError(cmd, result.returncode, command_result.stderr)
        return command_result

    def run_checked(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> str:
        """Execute a command and return stdout without the trailing newline.

        Raises:
            ExternalCommandError: If command exits with non-zero code
        """
        return self.run(cmd, cwd=cwd, env=env, check=True).value

    @staticmethod
    def which(*executables: str) -> str | None:
        """Return the path of the first executable found on PATH."""
        for executable in executables:
            found = shutil.which(executable)
            if found:
                return found
        return None

    def require(self, executable: str) -> str:
        """Return the path of an executable, raising if it is missing."""
        found = self.which(executable)
        if not found:
            raise MissingDependencyError(executable)
        return found
