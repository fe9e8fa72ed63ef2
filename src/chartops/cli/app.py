"""Main CLI application module.

Commands:
- upgrade: Helm upgrade of the release named after the namespace
- restart: rollout restart of every deployment
- rollback: re-tag an older image and deploy it
- valid_environment: check the deployed image belongs to this chart
- valid_secret: check the deployed secret has every declared key
- patch_secret: set one key of the deployed secret
- migrate: run schema migrations through a port forward
- dump: compressed pg_dump through a port forward
"""

import typer

from .commands import (
    dump,
    migrate,
    patch_secret,
    restart,
    rollback,
    upgrade,
    valid_environment,
    valid_secret,
)

# Create the main CLI application
app = typer.Typer(
    help="⎈  chartops - Helm chart deployment tool",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Deployment
app.command("upgrade")(upgrade)
app.command("restart")(restart)
app.command("rollback")(rollback)

# Checks
app.command("valid_environment")(valid_environment)
app.command("valid_secret")(valid_secret)

# Secrets and database
app.command("patch_secret")(patch_secret)
app.command("migrate")(migrate)
app.command("dump")(dump)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
