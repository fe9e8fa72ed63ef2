"""Command line interface.

The Typer application lives in ``chartops.cli.app``; this package only
groups the CLI layers:

- commands: Typer command handlers
- context: per-invocation dependency container
- deployment: the deployment orchestration core
- shared: console output and error handling
"""
