"""Cluster-side discovery: namespaces, pods and the deployed image."""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from ..errors import ParseError, PreconditionError
from .chart_context import ChartContext, load_chart_context

if TYPE_CHECKING:
    from ..shell_commands import KubectlCommands

IMAGE_JSONPATH = "{.spec.containers[0].image}"
SECRET_REF_JSONPATH = "{.spec.containers[0].envFrom[*].secretRef.name}"


class ClusterInspector:
    """Resolves what is currently running in a namespace.

    Attributes:
        kubectl: kubectl command wrapper
        app_pod_pattern: Regex selecting the representative application pod
                         (None selects the first pod)
    """

    def __init__(self, kubectl: KubectlCommands, app_pod_pattern: str | None = None) -> None:
        self.kubectl = kubectl
        self.app_pod_pattern = app_pod_pattern

    def find_pod(
        self, namespace: str, name_pattern: str, object_kind: str = "pods"
    ) -> str | None:
        """Return the first object whose name matches ``name_pattern``.

        Identifiers are sorted before matching so the choice does not depend
        on the listing order of the cluster client.

        Returns:
            Object identifier such as ``pod/web-5d9c``, or None
        """
        try:
            pattern = re.compile(name_pattern)
        except re.error as e:
            raise ParseError(f"Invalid name pattern '{name_pattern}'", details=str(e)) from e
        for identifier in sorted(self.kubectl.list_names(object_kind, namespace)):
            name = identifier.split("/", 1)[-1]
            if pattern.search(name):
                return identifier
        return None

    def representative_pod(self, namespace: str) -> str:
        """Return the pod whose spec describes the deployed application."""
        pod = self.find_pod(namespace, self.app_pod_pattern or "")
        if pod is None:
            raise PreconditionError(
                f"Repository not found on '{namespace}', check if this namespace "
                "exists on this cluster"
            )
        return pod

    def resolve_deployed_image(self, namespace: str) -> str:
        """Return the container image of the representative pod."""
        pod = self.representative_pod(namespace)
        image = self.kubectl.get_jsonpath(pod, namespace, IMAGE_JSONPATH).strip()
        if not image:
            raise PreconditionError(f"Pod '{pod}' on '{namespace}' reports no image")
        logger.debug(f"{namespace}: {pod} runs {image}")
        return image

    def resolve_secret_name(self, namespace: str) -> str:
        """Return the secret the application pod loads its environment from."""
        pod = self.representative_pod(namespace)
        names = self.kubectl.get_jsonpath(pod, namespace, SECRET_REF_JSONPATH).split()
        if not names:
            raise PreconditionError(
                f"Pod '{pod}' on '{namespace}' does not load any secret",
                details="Set CHARTOPS_SECRET_NAME to name the secret explicitly.",
            )
        return names[0]

    def check_environment(
        self, namespace: str, project_root: Path, chart_root: Path = Path("chart")
    ) -> ChartContext:
        """Verify every precondition for operating on ``namespace``.

        Raises:
            PreconditionError: If the namespace does not exist, or the chart or
                               its environments cannot be resolved
        """
        if not self.kubectl.namespace_exists(namespace):
            raise PreconditionError(
                f"Namespace '{namespace}' does not exist, check you are at the correct cluster"
            )
        return load_chart_context(project_root, chart_root)
