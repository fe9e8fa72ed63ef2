"""CommandResult builders shared by the unit tests."""

from chartops.cli.deployment.shell_commands.types import CommandResult

REGISTRY_HOST = "123456789.dkr.ecr.eu-west-1.amazonaws.com"


def ok(stdout: str = "") -> CommandResult:
    """Successful CommandResult with the given stdout."""
    return CommandResult(success=True, stdout=stdout, stderr="", returncode=0)


def failed(stderr: str = "error", returncode: int = 1) -> CommandResult:
    return CommandResult(success=False, stdout="", stderr=stderr, returncode=returncode)
