"""Kubectl command abstractions.

This module provides commands for Kubernetes resource inspection and
management via the kubectl client. Output is always decoded structurally
(names, jsonpath scalars, YAML documents), never sliced by offset.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import yaml

from ..errors import ParseError

if TYPE_CHECKING:
    from .runner import CommandRunner
    from .types import CommandResult


class KubectlCommands:
    """Kubectl-related shell commands.

    Provides operations for:
    - Namespace existence checks
    - Object listing and jsonpath field extraction
    - Secret retrieval and patching
    - Deployment rollout restarts
    """

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize kubectl commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    def _kubectl(self, args: list[str], *, check: bool = True) -> CommandResult:
        return self._runner.run(["kubectl", *args], check=check)

    # =========================================================================
    # Namespace Operations
    # =========================================================================

    def namespace_exists(self, namespace: str) -> bool:
        """Check if a namespace exists."""
        result = self._kubectl(["get", "namespace", namespace, "-o=name"], check=False)
        return result.success

    # =========================================================================
    # Object Queries
    # =========================================================================

    def list_names(self, object_kind: str, namespace: str) -> list[str]:
        """List object identifiers (e.g. ``pod/web-1``) of a kind in a namespace."""
        result = self._kubectl(["get", object_kind, "-o=name", "-n", namespace])
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def get_jsonpath(self, object_name: str, namespace: str, jsonpath: str) -> str:
        """Extract a field from an object with a jsonpath expression."""
        result = self._kubectl(
            ["get", object_name, "-n", namespace, "-o", f"jsonpath={jsonpath}"]
        )
        return result.value

    # =========================================================================
    # Secret Operations
    # =========================================================================

    def get_secret(self, name: str, namespace: str) -> dict[str, Any]:
        """Fetch a secret object and decode its YAML document."""
        result = self._kubectl(["get", "secret", name, "-n", namespace, "-o", "yaml"])
        try:
            document = yaml.safe_load(result.stdout)
        except yaml.YAMLError as e:
            raise ParseError(
                f"Secret '{name}' returned malformed YAML", details=str(e)
            ) from e
        if not isinstance(document, dict):
            raise ParseError(f"Secret '{name}' is not a YAML mapping")
        return document

    def patch_secret(
        self, name: str, namespace: str, patch: dict[str, Any]
    ) -> CommandResult:
        """Apply a strategic merge patch to a secret."""
        return self._kubectl(
            [
                "patch",
                "secret",
                name,
                "-n",
                namespace,
                "--patch",
                json.dumps(patch),
            ]
        )

    # =========================================================================
    # Deployment Operations
    # =========================================================================

    def rollout_restart(self, namespace: str, resource_type: str = "deploy") -> str:
        """Trigger a rolling restart of every resource of a type in a namespace."""
        return self._kubectl(["rollout", "restart", resource_type, "-n", namespace]).value

    # =========================================================================
    # Port Forwarding
    # =========================================================================

    @staticmethod
    def port_forward_command(
        pod: str,
        namespace: str,
        local_port: int,
        remote_port: int,
        address: str | None = None,
    ) -> list[str]:
        """Build the kubectl port-forward command line.

        ``address`` is the local interface to listen on (kubectl's default
        is localhost).
        """
        cmd = [
            "kubectl",
            "port-forward",
            pod,
            f"{local_port}:{remote_port}",
            "-n",
            namespace,
        ]
        if address:
            cmd += ["--address", address]
        return cmd
