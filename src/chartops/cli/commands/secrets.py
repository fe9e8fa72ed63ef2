"""Secret management commands."""

from typing import Annotated

import typer

from ..context import get_cli_context
from ..deployment.errors import PreconditionError
from ..shared import with_error_handling
from .options import NamespaceOption


@with_error_handling
def patch_secret(
    typer_ctx: typer.Context,
    namespace: NamespaceOption,
    key: Annotated[str, typer.Option("--key", "-k", help="Secret key to set", show_default=False)],
    value: Annotated[
        str,
        typer.Option(
            "--value",
            help="Plain-text value (it is base64-encoded before patching)",
            show_default=False,
        ),
    ],
) -> None:
    """Set one key of the NAMESPACE application secret."""
    ctx = get_cli_context(typer_ctx)
    chart = ctx.check_environment(namespace)
    validator = ctx.secret_validator()

    name = validator.patch(namespace, key, value)
    ctx.console.ok(f"Secret '{name}' on '{namespace}' patched: {key}")

    try:
        default_values_file = chart.default_values_file
    except PreconditionError:
        # Nothing declared, nothing to compare
        return
    missing = validator.missing_secrets(namespace, default_values_file)
    if missing:
        ctx.console.warn(f"Still missing on '{namespace}': {', '.join(missing)}")
