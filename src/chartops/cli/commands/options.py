"""Option types shared by the command modules."""

from typing import Annotated

import typer

NamespaceOption = Annotated[
    str,
    typer.Option(
        "--namespace",
        "-n",
        help="REQUIRED Kubernetes namespace, also used as the Helm release name",
        show_default=False,
    ),
]

VersionOption = Annotated[
    str | None,
    typer.Option(
        "--version",
        "-v",
        help="Image tag to deploy (defaults to the running one)",
    ),
]
