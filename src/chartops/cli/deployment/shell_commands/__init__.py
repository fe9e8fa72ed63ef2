"""Shell command abstractions for Kubernetes/Helm deployment operations.

This package provides a clean interface for the external tools driven
during deployment. It is organized into specialized modules for each tool:

- kubectl: Kubernetes object queries, secrets, rollouts, port forwards
- helm: Helm release upgrades
- ecr: Container registry tag listing and re-tagging

Usage:
    from chartops.cli.deployment.shell_commands import ShellCommands

    commands = ShellCommands(project_root=Path("."))
    if commands.kubectl.namespace_exists("staging"):
        print("Namespace found")
"""

from collections.abc import Callable
from pathlib import Path

from .ecr import EcrCommands
from .helm import HelmCommands
from .kubectl import KubectlCommands
from .runner import CommandRunner
from .types import CommandResult


class ShellCommands:
    """Unified interface for all shell command operations.

    Attributes:
        runner: The shared process runner
        helm: Helm-related commands
        kubectl: Kubernetes kubectl commands
        ecr: Container registry commands
    """

    def __init__(
        self,
        project_root: Path,
        *,
        debug: bool = False,
        echo: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the shell commands executor.

        Args:
            project_root: Path to the project root directory.
                         Commands will be executed from this directory by default.
            debug: Echo every command line before executing it
            echo: Callback used to echo command lines
        """
        self._project_root = Path(project_root)
        self.runner = CommandRunner(self._project_root, debug=debug, echo=echo)

        self.helm = HelmCommands(self.runner)
        self.kubectl = KubectlCommands(self.runner)
        self.ecr = EcrCommands(self.runner)

    @property
    def project_root(self) -> Path:
        """Get the project root path."""
        return self._project_root


__all__ = [
    "ShellCommands",
    "CommandResult",
    "CommandRunner",
    "EcrCommands",
    "HelmCommands",
    "KubectlCommands",
]
