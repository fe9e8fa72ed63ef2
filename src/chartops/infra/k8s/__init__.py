"""Kubernetes infrastructure helpers.

Example:
    from chartops.infra.k8s import port_forward

    with port_forward("staging", "postgres", inspector=inspector,
                      local_port=54320, remote_port=5432) as tunnel:
        ...
"""

from .port_forward import Tunnel, port_forward

__all__ = ["Tunnel", "port_forward"]
