"""CLI command implementations.

Commands are plain functions registered on the root application in
``chartops.cli.app``; they all take the target namespace via ``-n``.
"""

from .db import dump, migrate
from .deploy import restart, rollback, upgrade, valid_environment, valid_secret
from .secrets import patch_secret

__all__ = [
    "dump",
    "migrate",
    "patch_secret",
    "restart",
    "rollback",
    "upgrade",
    "valid_environment",
    "valid_secret",
]
