"""Chart deployment orchestration.

Components, leaves first:
- chart_context: local chart and environment discovery
- cluster_inspector: namespaces, pods and the deployed image
- versions: image parsing, release-candidate arithmetic, registry re-tagging
- secret_validator: declared vs. deployed secret keys
- deployer: Helm upgrade, rollback and rollout restart
"""

from .chart_context import (
    ChartContext,
    EnvironmentDescriptor,
    load_chart_context,
    resolve_chart_name,
    resolve_default_values_file,
    resolve_environments,
)
from .cluster_inspector import ClusterInspector
from .deployer import ChartDeployer
from .secret_validator import SecretSyncValidator, declared_secrets
from .versions import (
    ImageReference,
    RollbackTarget,
    SemanticVersion,
    VersionResolver,
    compute_release_candidate,
    extract_env_version,
    select_rollback_pair,
    sort_tags,
)

__all__ = [
    "ChartContext",
    "ChartDeployer",
    "ClusterInspector",
    "EnvironmentDescriptor",
    "ImageReference",
    "RollbackTarget",
    "SecretSyncValidator",
    "SemanticVersion",
    "VersionResolver",
    "compute_release_candidate",
    "declared_secrets",
    "extract_env_version",
    "load_chart_context",
    "resolve_chart_name",
    "resolve_default_values_file",
    "resolve_environments",
    "select_rollback_pair",
    "sort_tags",
]
