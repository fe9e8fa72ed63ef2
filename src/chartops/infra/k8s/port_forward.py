"""Port forwarding context manager for Kubernetes.

Provides a scoped ``kubectl port-forward`` to a cluster-internal database
pod for CLI operations. The forward is created right before use and is
always terminated when the scope exits, whether the body succeeds or raises.
"""

from __future__ import annotations

import socket
import subprocess
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from chartops.cli.deployment.errors import MissingDependencyError, PortForwardError
from chartops.cli.deployment.shell_commands.kubectl import KubectlCommands

if TYPE_CHECKING:
    from chartops.cli.deployment.chart_deployer.cluster_inspector import ClusterInspector
    from chartops.cli.deployment.shell_commands.runner import CommandRunner
    from chartops.cli.shared.console import CLIConsole


@dataclass(frozen=True)
class Tunnel:
    """An active port forward."""

    namespace: str
    pod: str
    local_host: str
    local_port: int
    remote_port: int


def _is_port_in_use(port: int, host: str = "127.0.0.1") -> bool:
    """Check if a local port is already in use.

    Args:
        port: Port number to check
        host: Host to check on (default: loopback)

    Returns:
        True if port is in use, False otherwise
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
            return False
        except OSError:
            return True


def _stop(process: subprocess.Popen[str]) -> None:
    process.terminate()
    try:
        process.wait(timeout=5)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()


@contextmanager
def port_forward(
    namespace: str,
    pod_pattern: str,
    *,
    inspector: ClusterInspector,
    local_port: int,
    remote_port: int,
    local_host: str = "127.0.0.1",
    settle_seconds: float = 2.0,
    runner: CommandRunner | None = None,
    console: CLIConsole | None = None,
) -> Iterator[Tunnel]:
    """Context manager for a database port forward.

    Args:
        namespace: Kubernetes namespace containing the pod
        pod_pattern: Regex matched against pod names (first sorted match wins)
        inspector: Cluster inspector used to find the pod
        local_port: Local port to forward from
        remote_port: Remote port on the pod
        local_host: Local address the forward binds to
        settle_seconds: Time to wait for the forward to bind before use
        runner: Command runner, used to echo the command line in debug mode
        console: CLI console for progress output

    Yields:
        Tunnel describing the active forward

    Raises:
        PortForwardError: If no pod matches, the port is taken, or the
                          forward exits before the settle delay elapses

    Example:
        >>> with port_forward("staging", "postgres", inspector=inspector,
        ...                   local_port=54320, remote_port=5432) as tunnel:
        ...     run_migration(url_through(tunnel), ...)
        ... # Port forwarding stopped, even if the body raised
    """
    pod = inspector.find_pod(namespace, pod_pattern)
    if not pod:
        raise PortForwardError(
            f"No pod matching '{pod_pattern}' in namespace '{namespace}'"
        )

    if _is_port_in_use(local_port, local_host):
        raise PortForwardError(f"Port {local_port} is already in use")

    cmd = KubectlCommands.port_forward_command(
        pod, namespace, local_port, remote_port, address=local_host
    )
    if runner:
        runner.echo_command(cmd)
    if console:
        console.print(f"[dim]Starting port-forward: {pod} {local_port}:{remote_port}[/dim]")

    try:
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as e:
        raise MissingDependencyError(cmd[0]) from e

    # Wait for port-forward to bind; there is no readiness probe
    time.sleep(settle_seconds)

    if process.poll() is not None:
        _, stderr = process.communicate()
        raise PortForwardError(
            "Port forward failed to start", details=(stderr or "").strip() or None
        )

    logger.debug(f"port-forward {local_host}:{local_port} -> {namespace}/{pod}:{remote_port}")
    try:
        yield Tunnel(
            namespace=namespace,
            pod=pod,
            local_host=local_host,
            local_port=local_port,
            remote_port=remote_port,
        )
    finally:
        _stop(process)
        if console:
            console.print("[dim]Port-forward stopped[/dim]")
