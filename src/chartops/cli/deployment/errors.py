"""Error taxonomy for deployment operations.

Every failure in the orchestration core is terminal for the current
invocation. The CLI turns any DeploymentError into a single diagnostic
line (plus an optional details panel) and a non-zero exit status.
"""

from __future__ import annotations

from collections.abc import Sequence


class DeploymentError(Exception):
    """Raised when a deployment operation fails."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class PreconditionError(DeploymentError):
    """Namespace, chart, environment or values file is missing."""


class IdentityMismatchError(DeploymentError):
    """The chart embedded in the live image is not the chart on disk."""


class ParseError(DeploymentError):
    """Malformed image reference, version, secret or command output."""


class MissingDependencyError(DeploymentError):
    """A required executable is not available on PATH."""

    def __init__(self, executable: str):
        self.executable = executable
        super().__init__(
            f"Required executable '{executable}' was not found on PATH",
            details=f"Install '{executable}' and make sure it is on your PATH.",
        )


class ExternalCommandError(DeploymentError):
    """An external tool exited with a non-zero status."""

    def __init__(self, cmd: Sequence[str], returncode: int, stderr: str):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Command '{self.cmd[0]}' failed with exit code {returncode}",
            details=stderr.strip() or None,
        )


class SecretSyncError(DeploymentError):
    """Keys declared in values.yaml are missing from the deployed secret."""

    def __init__(self, namespace: str, missing: Sequence[str]):
        self.namespace = namespace
        self.missing = sorted(missing)
        super().__init__(
            f"Secrets missing on '{namespace}': {', '.join(self.missing)}",
            details=(
                "Provision the missing keys before deploying:\n"
                + "\n".join(
                    f"  chartops patch_secret -n {namespace} --key {key} --value ..."
                    for key in self.missing
                )
            ),
        )


class PortForwardError(DeploymentError):
    """Error during port forwarding setup."""
