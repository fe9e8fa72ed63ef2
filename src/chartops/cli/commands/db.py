"""Database commands run through a temporary port forward.

The database URL is read from the application secret and rewritten to the
local end of the tunnel; the tunnel only lives for the duration of the
command.
"""

from pathlib import Path
from typing import Annotated

import typer

from chartops.infra.postgres import PostgresDump, run_migration

from ..context import get_cli_context
from ..shared import with_error_handling
from .options import NamespaceOption


@with_error_handling
def migrate(typer_ctx: typer.Context, namespace: NamespaceOption) -> None:
    """Apply schema migrations to the NAMESPACE database."""
    ctx = get_cli_context(typer_ctx)
    ctx.check_environment(namespace)

    with ctx.database_tunnel(namespace) as database_url:
        run_migration(
            ctx.commands.runner,
            ctx.settings.migration_command,
            database_url=database_url,
            console=ctx.console,
        )


@with_error_handling
def dump(
    typer_ctx: typer.Context,
    namespace: NamespaceOption,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            "-d",
            help="Database to dump (defaults to the one in the application secret)",
        ),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output-dir",
            "-o",
            help="Directory for the dump file (defaults to dump_dir in chartops.yaml)",
            file_okay=False,
        ),
    ] = None,
) -> None:
    """Write a compressed pg_dump of the NAMESPACE database."""
    ctx = get_cli_context(typer_ctx)
    ctx.check_environment(namespace)

    target_dir = output_dir or ctx.project_root / ctx.settings.dump_dir
    dumper = PostgresDump(ctx.commands.runner, ctx.console, target_dir)

    with ctx.database_tunnel(namespace) as database_url:
        dumper.create_dump(database_url, database=database)
