"""PostgreSQL operations run through a Kubernetes tunnel."""

from .backup import Compressor, PostgresDump, select_compressor
from .connection import (
    database_name,
    resolve_database_url,
    rewrite_database_url,
    with_database,
)
from .migrations import run_migration

__all__ = [
    "Compressor",
    "PostgresDump",
    "database_name",
    "resolve_database_url",
    "rewrite_database_url",
    "run_migration",
    "select_compressor",
    "with_database",
]
