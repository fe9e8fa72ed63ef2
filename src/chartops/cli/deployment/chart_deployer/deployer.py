"""Helm upgrade, registry rollback and rollout restart.

The deployer never touches the cluster before it has confirmed that the
image running in the namespace belongs to the chart on disk.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from .versions import RollbackTarget, extract_env_version

if TYPE_CHECKING:
    from chartops.cli.shared.console import CLIConsole

    from ..shell_commands import ShellCommands
    from .chart_context import ChartContext, EnvironmentDescriptor
    from .cluster_inspector import ClusterInspector
    from .versions import VersionResolver


class ChartDeployer:
    """Drives Helm and the registry for one chart.

    Attributes:
        commands: Shell command executor
        chart: Immutable chart context
        inspector: Cluster inspector
        resolver: Registry version resolver
        console: CLI console for progress output
    """

    def __init__(
        self,
        commands: ShellCommands,
        chart: ChartContext,
        inspector: ClusterInspector,
        resolver: VersionResolver,
        console: CLIConsole,
    ) -> None:
        self.commands = commands
        self.chart = chart
        self.inspector = inspector
        self.resolver = resolver
        self.console = console

    def deployed_environment(self, namespace: str) -> tuple[EnvironmentDescriptor, str]:
        """Resolve the environment and version currently running in ``namespace``."""
        image = self.inspector.resolve_deployed_image(namespace)
        return extract_env_version(image, self.chart.environments)

    def upgrade(
        self,
        namespace: str,
        version: str | None = None,
        *,
        recreate_pods: bool = False,
    ) -> str:
        """Upgrade the release named after ``namespace``.

        Args:
            namespace: Target namespace (also the release name)
            version: Image tag to deploy (defaults to the running one)
            recreate_pods: Recreate pods; ``--recreate-pods`` on v1 charts,
                           a rollout restart on v2 charts

        Returns:
            The deployed image tag
        """
        environment, repo_version = self.deployed_environment(namespace)
        target = version or repo_version
        v2 = self.chart.requires_namespace_flag

        self.console.info(
            f"Upgrading helm: {self.chart.name} on '{namespace}' "
            f"({environment.name}) to {target}"
        )
        result = self.commands.helm.upgrade(
            namespace,
            self.chart.path,
            environment.values_file,
            target,
            namespace=namespace if v2 else None,
            recreate_pods=recreate_pods and not v2,
        )
        if result.value:
            self.console.print(result.value)

        if recreate_pods and v2:
            self.restart(namespace)
        return target

    def rollback(self, namespace: str, version: str | None = None) -> RollbackTarget:
        """Re-tag an older image under a new release-candidate tag.

        The caller is expected to follow up with ``upgrade(namespace,
        target.new_tag)``.
        """
        environment, _ = self.deployed_environment(namespace)
        repository = environment.registry_repository

        target = self.resolver.resolve_rollback_target(repository, version)
        self.console.info(
            f"Re-tagging {repository}:{target.base_version} as {target.new_tag} "
            f"(current {target.current_version})"
        )
        self.resolver.retag(repository, target.base_version, target.new_tag)
        logger.info(f"{repository}: pushed {target.new_tag}")
        return target

    def restart(self, namespace: str) -> None:
        """Rollout-restart every deployment in ``namespace``."""
        self.console.info(f"Restarting deployments on '{namespace}'")
        output = self.commands.kubectl.rollout_restart(namespace)
        if output:
            self.console.print(output)
