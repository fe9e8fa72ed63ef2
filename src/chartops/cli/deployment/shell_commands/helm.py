"""Helm command abstractions.

This module provides the Helm release upgrade command used by the
deployment driver.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runner import CommandRunner
    from .types import CommandResult


class HelmCommands:
    """Helm-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    @staticmethod
    def upgrade_command(
        release_name: str,
        chart_path: Path,
        values_file: Path,
        image_tag: str,
        *,
        namespace: str | None = None,
        recreate_pods: bool = False,
    ) -> list[str]:
        """Build the ``helm upgrade`` command line.

        Args:
            release_name: Name of the Helm release (the namespace by convention)
            chart_path: Path to the chart directory
            values_file: Environment values file
            image_tag: Image tag to deploy
            namespace: Explicit namespace flag (required by v2 charts)
            recreate_pods: Add ``--recreate-pods`` (v1 charts only)

        Returns:
            Command and arguments
        """
        cmd = [
            "helm",
            "upgrade",
            release_name,
            str(chart_path),
            "-f",
            str(values_file),
            f"--set=image.tag={image_tag}",
        ]
        if namespace:
            cmd.extend(["-n", namespace])
        if recreate_pods:
            cmd.append("--recreate-pods")
        return cmd

    def upgrade(
        self,
        release_name: str,
        chart_path: Path,
        values_file: Path,
        image_tag: str,
        *,
        namespace: str | None = None,
        recreate_pods: bool = False,
    ) -> CommandResult:
        """Upgrade a Helm release to a new image tag.

        Example:
            >>> helm.upgrade(
            ...     "staging",
            ...     Path("chart/payments"),
            ...     Path("chart/payments/values.staging.yaml"),
            ...     "2.4.0",
            ...     namespace="staging",
            ... )
        """
        return self._runner.run(
            self.upgrade_command(
                release_name,
                chart_path,
                values_file,
                image_tag,
                namespace=namespace,
                recreate_pods=recreate_pods,
            )
        )
