"""Deployment orchestration for chart repositories."""

from .errors import (
    DeploymentError,
    ExternalCommandError,
    IdentityMismatchError,
    MissingDependencyError,
    ParseError,
    PortForwardError,
    PreconditionError,
    SecretSyncError,
)

__all__ = [
    "DeploymentError",
    "ExternalCommandError",
    "IdentityMismatchError",
    "MissingDependencyError",
    "ParseError",
    "PortForwardError",
    "PreconditionError",
    "SecretSyncError",
]
