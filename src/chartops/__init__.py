"""Operator CLI for Helm chart deployments and database tunnels."""

__version__ = "0.1.0"
