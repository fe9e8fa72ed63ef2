from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chartops.cli.deployment.shell_commands.runner import CommandRunner
    from chartops.cli.shared.console import CLIConsole


def run_migration(
    runner: CommandRunner,
    command: Sequence[str],
    *,
    database_url: str,
    console: CLIConsole,
) -> None:
    """Run the schema migration command against ``database_url``.

    This function is called inside a port-forward context; the URL already
    points at the local end of the tunnel.

    Raises:
        ExternalCommandError: If the migration command fails
        MissingDependencyError: If the migration tool is not installed
    """
    console.info(f"Running migrations: {' '.join(command)}")
    result = runner.run(command, env={"DATABASE_URL": database_url})

    # Migration tools log to both streams
    if result.stdout.strip():
        console.print(result.stdout.rstrip())
    if result.stderr.strip():
        console.print(result.stderr.rstrip())

    console.ok("Migrations applied successfully")
