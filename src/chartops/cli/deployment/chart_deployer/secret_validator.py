"""Secret synchronisation checks.

The base ``values.yaml`` lists under ``secrets`` every key the application
expects in its Kubernetes secret. Deploying while a key is missing produces
pods that crash at start-up, so upgrades are gated on this check.
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from ..errors import ParseError, SecretSyncError

if TYPE_CHECKING:
    from ..shell_commands import KubectlCommands
    from .cluster_inspector import ClusterInspector


def declared_secrets(default_values_file: Path) -> set[str]:
    """Return the secret key names declared in the base values file."""
    try:
        document = yaml.safe_load(default_values_file.read_text()) or {}
    except yaml.YAMLError as e:
        raise ParseError(f"{default_values_file} is not valid YAML", details=str(e)) from e

    secrets = document.get("secrets") if isinstance(document, dict) else None
    if secrets is None:
        return set()
    if not isinstance(secrets, list) or not all(isinstance(s, str) for s in secrets):
        raise ParseError(f"'secrets' in {default_values_file} must be a list of key names")
    return set(secrets)


class SecretSyncValidator:
    """Compares declared secret keys with the deployed secret object."""

    def __init__(
        self,
        kubectl: KubectlCommands,
        inspector: ClusterInspector,
        secret_name: str | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            kubectl: kubectl command wrapper
            inspector: Cluster inspector used to discover the secret name
            secret_name: Explicit secret name (skips discovery)
        """
        self.kubectl = kubectl
        self.inspector = inspector
        self._secret_name = secret_name

    def secret_name(self, namespace: str) -> str:
        return self._secret_name or self.inspector.resolve_secret_name(namespace)

    def deployed_secrets(self, namespace: str) -> set[str]:
        """Return the data keys of the live secret."""
        secret = self.kubectl.get_secret(self.secret_name(namespace), namespace)
        data = secret.get("data") or {}
        if not isinstance(data, dict):
            raise ParseError(f"Secret on '{namespace}' has a malformed data section")
        return set(data)

    def missing_secrets(self, namespace: str, default_values_file: Path) -> list[str]:
        """Declared keys absent from the deployed secret, sorted."""
        return sorted(declared_secrets(default_values_file) - self.deployed_secrets(namespace))

    def check(self, namespace: str, default_values_file: Path) -> None:
        """Raise SecretSyncError if any declared key is not deployed."""
        missing = self.missing_secrets(namespace, default_values_file)
        if missing:
            raise SecretSyncError(namespace, missing)

    def patch(self, namespace: str, key: str, value: str) -> str:
        """Set one key of the deployed secret.

        Returns:
            Name of the patched secret
        """
        name = self.secret_name(namespace)
        encoded = base64.b64encode(value.encode()).decode()
        self.kubectl.patch_secret(name, namespace, {"data": {key: encoded}})
        return name
