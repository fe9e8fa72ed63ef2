"""Local chart discovery.

The chart repository holds exactly one chart under ``chart/<name>/`` with a
base ``values.yaml`` and per-environment ``values*.yaml`` override files.
Each values file declares ``image.repository`` as ``host/chart/environment``;
that is what binds an environment name to its values file and to the chart
identity expected in the live image.

Everything here is read once per process into an immutable ChartContext.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

import yaml
from loguru import logger

from ..errors import PreconditionError

DEFAULT_VALUES_FILE = "values.yaml"
VALUES_GLOB = "values*.yaml"


@dataclass(frozen=True)
class EnvironmentDescriptor:
    """One deployment environment declared by a values file.

    Attributes:
        name: Environment name (e.g. "staging")
        values_file: Path of the values file declaring it
        chart: Chart identity expected in the deployed image
        repository: Full ``image.repository`` value
    """

    name: str
    values_file: Path
    chart: str
    repository: str

    @property
    def registry_repository(self) -> str:
        """Repository name inside the registry (the path without its host)."""
        return self.repository.split("/", 1)[1]


@dataclass(frozen=True)
class ChartContext:
    """Immutable view of the local chart, built once per invocation."""

    name: str
    path: Path
    api_version: str
    environments: Mapping[str, EnvironmentDescriptor] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def requires_namespace_flag(self) -> bool:
        """v2 charts (Helm 3) have no implicit namespace context."""
        return self.api_version == "v2"

    @property
    def default_values_file(self) -> Path:
        """The base values file (raises PreconditionError when absent)."""
        return resolve_default_values_file(self.environments)

    def environment(self, name: str) -> EnvironmentDescriptor:
        """Look up an environment by name."""
        try:
            return self.environments[name]
        except KeyError:
            raise PreconditionError(
                f"No values file declares the environment '{name}'",
                details=f"Known environments: {', '.join(sorted(self.environments))}",
            ) from None


def resolve_chart_name(chart_root: Path) -> str | None:
    """Return the chart directory name under ``chart_root``.

    Several subdirectories is ambiguous: the first in sorted order wins and
    a warning is logged.
    """
    try:
        names = sorted(p.name for p in chart_root.iterdir() if p.is_dir())
    except OSError:
        return None

    if not names:
        return None
    if len(names) > 1:
        logger.warning(
            f"Several charts found under {chart_root} ({', '.join(names)}), using '{names[0]}'"
        )
    return names[0]


def _read_repository(values_file: Path) -> str | None:
    try:
        document = yaml.safe_load(values_file.read_text())
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Cannot read {values_file}: {e}")
        return None

    image = document.get("image") if isinstance(document, dict) else None
    repository = image.get("repository") if isinstance(image, dict) else None
    if not isinstance(repository, str):
        logger.warning(f"{values_file} has no image.repository")
        return None
    return repository


def resolve_environments(chart_dir: Path) -> dict[str, EnvironmentDescriptor]:
    """Build the environment map from every ``values*.yaml`` in ``chart_dir``.

    Fails closed: if any values file lacks a ``host/chart/environment``
    repository the result is empty.
    """
    environments: dict[str, EnvironmentDescriptor] = {}

    for values_file in sorted(chart_dir.glob(VALUES_GLOB)):
        repository = _read_repository(values_file)
        if repository is None:
            return {}

        parts = repository.split("/")
        if len(parts) != 3 or not all(parts):
            logger.warning(
                f"{values_file}: image.repository '{repository}' is not host/chart/environment"
            )
            return {}
        _host, chart, environment = parts

        if environment in environments:
            logger.warning(
                f"Environment '{environment}' declared by both "
                f"{environments[environment].values_file.name} and {values_file.name}, "
                f"using {values_file.name}"
            )
        environments[environment] = EnvironmentDescriptor(
            name=environment,
            values_file=values_file,
            chart=chart,
            repository=repository,
        )

    return environments


def resolve_default_values_file(
    environments: Mapping[str, EnvironmentDescriptor],
) -> Path:
    """Return the base ``values.yaml`` among the descriptor files."""
    for descriptor in environments.values():
        if descriptor.values_file.name == DEFAULT_VALUES_FILE:
            return descriptor.values_file
    raise PreconditionError(
        f"This chart does not have a default {DEFAULT_VALUES_FILE}",
        details="The base values file declares the secrets every environment needs.",
    )


def read_api_version(chart_dir: Path) -> str:
    """Return the ``apiVersion`` declared in Chart.yaml (``v1`` when absent)."""
    chart_file = chart_dir / "Chart.yaml"
    try:
        document = yaml.safe_load(chart_file.read_text())
    except (OSError, yaml.YAMLError):
        return "v1"
    if isinstance(document, dict) and document.get("apiVersion"):
        return str(document["apiVersion"])
    return "v1"


def load_chart_context(project_root: Path, chart_root: Path = Path("chart")) -> ChartContext:
    """Discover the chart and its environments.

    Raises:
        PreconditionError: If there is no chart directory or no environments
    """
    root = project_root / chart_root
    name = resolve_chart_name(root)
    if name is None:
        raise PreconditionError("This directory does not have a chart folder")

    chart_dir = root / name
    environments = resolve_environments(chart_dir)
    if not environments:
        raise PreconditionError("This directory does not have environments defined")

    return ChartContext(
        name=name,
        path=chart_dir,
        api_version=read_api_version(chart_dir),
        environments=MappingProxyType(environments),
    )
