"""Database connection URIs read from cluster secrets.

The database has no external network path, so whatever host and port the
application sees in-cluster are replaced by the local end of the tunnel.
"""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING
from urllib.parse import urlsplit, urlunsplit

from chartops.cli.deployment.errors import ParseError, PreconditionError

if TYPE_CHECKING:
    from chartops.cli.deployment.shell_commands.kubectl import KubectlCommands


def rewrite_database_url(url: str, host: str, port: int) -> str:
    """Point a database URL at ``host:port``, keeping credentials and path.

    >>> rewrite_database_url("postgres://app:pw@db.internal:5432/payments", "127.0.0.1", 54320)
    'postgres://app:pw@127.0.0.1:54320/payments'
    """
    parsed = urlsplit(url)
    if not parsed.scheme or not parsed.netloc:
        raise ParseError("Database URL is not a valid URI")

    userinfo, at, _ = parsed.netloc.rpartition("@")
    netloc = f"{userinfo}{at}{host}:{port}"
    return urlunsplit((parsed.scheme, netloc, parsed.path, parsed.query, parsed.fragment))


def database_name(url: str) -> str:
    """Return the database name (the URL path without its leading slash)."""
    name = urlsplit(url).path.lstrip("/")
    if not name:
        raise ParseError("Database URL does not name a database")
    return name


def resolve_database_url(
    kubectl: KubectlCommands,
    namespace: str,
    secret_name: str,
    key: str,
    *,
    host: str,
    port: int,
) -> str:
    """Read ``key`` from a secret and rewrite it to go through the tunnel.

    Raises:
        PreconditionError: If the secret has no such key
        ParseError: If the value is not base64 or not a URI
    """
    encoded = kubectl.get_jsonpath(f"secret/{secret_name}", namespace, f"{{.data.{key}}}")
    if not encoded.strip():
        raise PreconditionError(f"Secret '{secret_name}' on '{namespace}' has no {key}")

    try:
        url = base64.b64decode(encoded.strip(), validate=True).decode()
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ParseError(f"{key} in secret '{secret_name}' is not valid base64") from e

    return rewrite_database_url(url.strip(), host, port)


def with_database(url: str, database: str) -> str:
    """Return ``url`` pointing at another database on the same server."""
    parsed = urlsplit(url)
    return urlunsplit((parsed.scheme, parsed.netloc, f"/{database}", parsed.query, parsed.fragment))
