"""Image reference parsing and version arithmetic.

Rollbacks never reuse an existing tag: the registry refuses to point an
existing tag at different content, so rolling back re-tags the *old* image
manifest under a *new* release-candidate version.
"""

from __future__ import annotations

import os
import re
import tempfile
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from loguru import logger
from packaging.version import InvalidVersion, Version

from ..errors import IdentityMismatchError, ParseError, PreconditionError

if TYPE_CHECKING:
    from ..shell_commands import EcrCommands
    from .chart_context import EnvironmentDescriptor

LATEST_TAG = "latest"

_ENV_VERSION_TAG = re.compile(r"(?P<environment>[A-Za-z][\w.-]*?)-(?P<version>\d[\w.+-]*)")
_SEMVER = re.compile(r"(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)(?:-rc\.(?P<rc>\d+))?")


@dataclass(frozen=True)
class ImageReference:
    """A deployed container image split into chart, environment and version.

    Two layouts are understood:

    - ``registry/chart:environment-version``
    - ``host/chart/environment:version`` (the values.yaml repository plus a tag)
    """

    image: str
    chart: str
    environment: str
    version: str

    @classmethod
    def parse(cls, image: str) -> ImageReference:
        ref = image.strip()
        slash = ref.rfind("/")
        colon = ref.rfind(":")
        if colon <= slash:
            raise ParseError(f"Image '{image}' has no tag")

        path, tag = ref[:colon], ref[colon + 1 :]
        segments = path.split("/")

        match = _ENV_VERSION_TAG.fullmatch(tag)
        if match and len(segments) >= 2:
            return cls(
                image=ref,
                chart=segments[-1],
                environment=match.group("environment"),
                version=match.group("version"),
            )
        if len(segments) >= 3 and tag:
            return cls(image=ref, chart=segments[-2], environment=segments[-1], version=tag)

        raise ParseError(
            f"Cannot parse image '{image}'",
            details="Expected registry/chart:environment-version or host/chart/environment:version",
        )


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """``MAJOR.MINOR.PATCH[-rc.N]``; ``rc == 0`` means a final release."""

    major: int
    minor: int
    patch: int
    rc: int = 0

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        match = _SEMVER.fullmatch(text.strip())
        if not match:
            raise ParseError(
                f"'{text}' is not a MAJOR.MINOR.PATCH[-rc.N] version",
            )
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            rc=int(match.group("rc") or 0),
        )

    @property
    def is_release_candidate(self) -> bool:
        return self.rc > 0

    def next_release_candidate(self) -> SemanticVersion:
        patch = self.patch if self.is_release_candidate else self.patch + 1
        return SemanticVersion(self.major, self.minor, patch, self.rc + 1)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-rc.{self.rc}" if self.rc else base


def compute_release_candidate(current_version: str) -> str:
    """Return the next release-candidate tag after ``current_version``.

    >>> compute_release_candidate("1.2.3")
    '1.2.4-rc.1'
    >>> compute_release_candidate("1.2.4-rc.1")
    '1.2.4-rc.2'
    """
    return str(SemanticVersion.parse(current_version).next_release_candidate())


def extract_env_version(
    image: str, environments: Mapping[str, EnvironmentDescriptor]
) -> tuple[EnvironmentDescriptor, str]:
    """Map a deployed image onto its environment descriptor and version.

    Raises:
        ParseError: If the image cannot be parsed
        PreconditionError: If no values file declares the image's environment
        IdentityMismatchError: If the image belongs to a different chart
    """
    reference = ImageReference.parse(image)

    descriptor = environments.get(reference.environment)
    if descriptor is None:
        raise PreconditionError(
            f"No values file declares the environment '{reference.environment}'",
            details=f"Deployed image: {reference.image}",
        )

    if reference.chart != descriptor.chart:
        raise IdentityMismatchError(
            "FATAL!!! This chart is not for this repository!!!",
            details=(
                f"Deployed image {reference.image} belongs to chart '{reference.chart}', "
                f"but {descriptor.values_file.name} expects '{descriptor.chart}'"
            ),
        )
    return descriptor, reference.version


def _semantic_key(tag: str) -> tuple[int, Version | str]:
    try:
        return (0, Version(tag))
    except InvalidVersion:
        return (1, tag)


def sort_tags(
    tags: Iterable[str], order: Literal["lexical", "semantic"] = "lexical"
) -> list[str]:
    """Deduplicate and sort registry tags.

    ``lexical`` sorts the tag strings ("1.0.10" before "1.0.9"); ``semantic``
    orders by version and puts non-version tags such as ``latest`` last.
    """
    unique = set(tags)
    if order == "semantic":
        return sorted(unique, key=_semantic_key)
    return sorted(unique)


def select_rollback_pair(tags: list[str]) -> tuple[str, str]:
    """Pick ``(old_version, current_version)`` from sorted registry tags.

    Normally the last two tags. When the final tag is ``latest`` the pair
    is taken from the window ending two entries before it:
    ``[a, b, c, latest] -> (a, b)``.

    Raises:
        PreconditionError: If there are not enough tags
    """
    if tags and tags[-1] == LATEST_TAG:
        window = tags[-4:-2] if len(tags) >= 4 else []
    else:
        window = tags[-2:]

    if len(window) < 2:
        raise PreconditionError(
            "Not enough image versions in the registry to roll back",
            details=f"Tags found: {', '.join(tags) or 'none'}",
        )
    return window[0], window[1]


@dataclass(frozen=True)
class RollbackTarget:
    """The image to re-tag and the new tag it receives."""

    repository: str
    base_version: str
    current_version: str
    new_tag: str


class VersionResolver:
    """Registry queries behind rollbacks.

    Attributes:
        ecr: Registry command wrapper
        max_items: Upper bound of tags fetched from the registry
        order: Tag ordering used to find the most recent versions
    """

    def __init__(
        self,
        ecr: EcrCommands,
        *,
        max_items: int = 100,
        order: Literal["lexical", "semantic"] = "lexical",
    ) -> None:
        self.ecr = ecr
        self.max_items = max_items
        self.order = order

    def list_registry_versions(self, repository: str) -> list[str]:
        """Return the repository's tags in ascending order."""
        return sort_tags(self.ecr.list_image_tags(repository, self.max_items), self.order)

    def resolve_rollback_target(
        self, repository: str, explicit_version: str | None = None
    ) -> RollbackTarget:
        """Compute which image to re-tag and under which new tag.

        Raises:
            PreconditionError: If ``explicit_version`` is not in the registry
                               or there are too few tags
            ParseError: If the current version is not a semantic version
        """
        tags = self.list_registry_versions(repository)
        old_version, current_version = select_rollback_pair(tags)

        if explicit_version is not None and explicit_version not in tags:
            raise PreconditionError(
                f"Version '{explicit_version}' does not exist in {repository}",
                details=f"Most recent tags: {', '.join(tags[-10:])}",
            )

        target = RollbackTarget(
            repository=repository,
            base_version=explicit_version or old_version,
            current_version=current_version,
            new_tag=compute_release_candidate(current_version),
        )
        logger.debug(f"Rollback target: {target}")
        return target

    def retag(self, repository: str, base_version: str, new_tag: str) -> None:
        """Push the manifest of ``base_version`` again under ``new_tag``."""
        manifest = self.ecr.get_image_manifest(repository, base_version)
        if not manifest.strip() or manifest.strip() == "None":
            raise ParseError(f"No manifest found for {repository}:{base_version}")

        fd, name = tempfile.mkstemp(prefix="manifest-", suffix=".json")
        manifest_path = Path(name)
        try:
            with os.fdopen(fd, "w") as f:
                f.write(manifest)
            self.ecr.put_image(repository, new_tag, manifest_path)
        finally:
            manifest_path.unlink(missing_ok=True)

