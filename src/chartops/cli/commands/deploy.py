"""Chart deployment commands.

Every command verifies the namespace, the chart folder and its environments
before it touches the cluster.
"""

from typing import Annotated

import typer

from ..context import get_cli_context
from ..shared import with_error_handling
from .options import NamespaceOption, VersionOption

# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@with_error_handling
def upgrade(
    typer_ctx: typer.Context,
    namespace: NamespaceOption,
    version: VersionOption = None,
    recreate_pods: Annotated[
        bool,
        typer.Option(
            "--recreate-pods",
            "-r",
            help="Recreate the pods. ATTENTION: this can cause downtime!",
        ),
    ] = False,
) -> None:
    """Upgrade the Helm release of NAMESPACE.

    The deployed secret must contain every key declared in values.yaml.
    """
    ctx = get_cli_context(typer_ctx)
    chart = ctx.check_environment(namespace)
    ctx.console.print_header(f"Upgrading {chart.name} on '{namespace}'")
    ctx.secret_validator().check(namespace, chart.default_values_file)

    deployed = ctx.deployer(chart).upgrade(namespace, version, recreate_pods=recreate_pods)
    ctx.console.ok(f"{chart.name} on '{namespace}' upgraded to {deployed}")


@with_error_handling
def restart(typer_ctx: typer.Context, namespace: NamespaceOption) -> None:
    """Rollout-restart every deployment of NAMESPACE."""
    ctx = get_cli_context(typer_ctx)
    chart = ctx.check_environment(namespace)

    ctx.deployer(chart).restart(namespace)
    ctx.console.ok(f"Deployments on '{namespace}' restarted")


@with_error_handling
def rollback(
    typer_ctx: typer.Context,
    namespace: NamespaceOption,
    version: Annotated[
        str | None,
        typer.Option(
            "--version",
            "-v",
            help="Registry tag to roll back to (defaults to the previous release)",
        ),
    ] = None,
) -> None:
    """Roll NAMESPACE back to an older image.

    The older image is pushed again under a new release-candidate tag, which
    is then deployed.
    """
    ctx = get_cli_context(typer_ctx)
    chart = ctx.check_environment(namespace)
    ctx.console.print_header(f"Rolling back {chart.name} on '{namespace}'", style="yellow")
    ctx.secret_validator().check(namespace, chart.default_values_file)

    deployer = ctx.deployer(chart)
    target = deployer.rollback(namespace, version)
    deployed = deployer.upgrade(namespace, target.new_tag)
    ctx.console.ok(
        f"{chart.name} on '{namespace}' rolled back to {target.base_version} as {deployed}"
    )


@with_error_handling
def valid_environment(typer_ctx: typer.Context, namespace: NamespaceOption) -> None:
    """Check that NAMESPACE runs an image of this chart."""
    ctx = get_cli_context(typer_ctx)
    chart = ctx.check_environment(namespace)

    environment, version = ctx.deployer(chart).deployed_environment(namespace)
    ctx.console.ok(
        f"'{namespace}' runs {chart.name} {version} "
        f"(environment {environment.name}, {environment.values_file.name})"
    )


@with_error_handling
def valid_secret(typer_ctx: typer.Context, namespace: NamespaceOption) -> None:
    """Check that the NAMESPACE secret has every key declared in values.yaml."""
    ctx = get_cli_context(typer_ctx)
    chart = ctx.check_environment(namespace)

    ctx.secret_validator().check(namespace, chart.default_values_file)
    ctx.console.ok(f"Secrets on '{namespace}' are in sync with the chart")
