"""CLI context and dependency container."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import typer

from chartops.cli.deployment.chart_deployer import (
    ChartContext,
    ChartDeployer,
    ClusterInspector,
    SecretSyncValidator,
    VersionResolver,
)
from chartops.cli.deployment.errors import DeploymentError
from chartops.cli.deployment.shell_commands import ShellCommands
from chartops.cli.shared.console import CLIConsole, console
from chartops.infra.k8s import port_forward
from chartops.infra.postgres import resolve_database_url
from chartops.runtime.config import Settings, load_settings
from chartops.runtime.config.config_loader import CONFIG_PATH
from chartops.runtime.logging import configure_logging


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    project_root: Path
    settings: Settings
    commands: ShellCommands
    inspector: ClusterInspector

    def check_environment(self, namespace: str) -> ChartContext:
        """Verify the namespace, chart and environments before any mutation."""
        return self.inspector.check_environment(
            namespace, self.project_root, self.settings.chart_root
        )

    def version_resolver(self) -> VersionResolver:
        return VersionResolver(
            self.commands.ecr,
            max_items=self.settings.registry_max_items,
            order=self.settings.version_sort,
        )

    def deployer(self, chart: ChartContext) -> ChartDeployer:
        return ChartDeployer(
            commands=self.commands,
            chart=chart,
            inspector=self.inspector,
            resolver=self.version_resolver(),
            console=self.console,
        )

    def secret_validator(self) -> SecretSyncValidator:
        return SecretSyncValidator(
            self.commands.kubectl, self.inspector, secret_name=self.settings.secret_name
        )

    @contextmanager
    def database_tunnel(self, namespace: str) -> Iterator[str]:
        """Open a tunnel to the namespace database and yield its local URL."""
        s = self.settings
        database_url = resolve_database_url(
            self.commands.kubectl,
            namespace,
            self.secret_validator().secret_name(namespace),
            s.database_url_key,
            host=s.db_local_host,
            port=s.db_local_port,
        )
        with port_forward(
            namespace,
            s.db_pod_pattern,
            inspector=self.inspector,
            local_port=s.db_local_port,
            remote_port=s.db_remote_port,
            local_host=s.db_local_host,
            settle_seconds=s.tunnel_settle_seconds,
            runner=self.commands.runner,
            console=self.console,
        ):
            yield database_url


def build_cli_context(project_root: Path | None = None) -> CLIContext:
    """Build a fresh CLIContext.

    Raises:
        DeploymentError: If the configuration is invalid
    """
    project_root = project_root or Path.cwd()
    try:
        settings = load_settings(project_root / CONFIG_PATH)
    except ValueError as e:
        raise DeploymentError("Invalid configuration", details=str(e)) from e

    configure_logging(settings.debug)
    commands = ShellCommands(project_root, debug=settings.debug, echo=console.echo)

    return CLIContext(
        console=console,
        project_root=project_root,
        settings=settings,
        commands=commands,
        inspector=ClusterInspector(commands.kubectl, settings.app_pod_pattern),
    )


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    if ctx is not None and isinstance(ctx.obj, CLIContext):
        return ctx.obj
    return build_cli_context()
