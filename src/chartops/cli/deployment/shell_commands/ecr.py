"""Container registry (AWS ECR) command abstractions.

Only the three calls needed to re-tag an image are wrapped: listing tags,
reading an image manifest and pushing a manifest under a new tag.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runner import CommandRunner
    from .types import CommandResult


class EcrCommands:
    """ECR-related shell commands (via the ``aws`` CLI)."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize ECR commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    def list_image_tags(self, repository: str, max_items: int) -> list[str]:
        """List image tags of a repository in registry order.

        ``--output text`` emits one ``IMAGEIDS<TAB>digest<TAB>tag`` row per
        image id; untagged images have no third column and pagination adds a
        ``NEXTTOKEN`` row, both of which are skipped.
        """
        output = self._runner.run_checked(
            [
                "aws",
                "ecr",
                "list-images",
                "--repository-name",
                repository,
                "--output",
                "text",
                "--max-items",
                str(max_items),
            ]
        )
        tags: list[str] = []
        for line in output.splitlines():
            columns = line.split("\t")
            if columns[0] == "IMAGEIDS" and len(columns) >= 3 and columns[2].strip():
                tags.append(columns[2].strip())
        return tags

    def get_image_manifest(self, repository: str, tag: str) -> str:
        """Return the raw manifest of a tagged image."""
        return self._runner.run_checked(
            [
                "aws",
                "ecr",
                "batch-get-image",
                "--repository-name",
                repository,
                "--image-ids",
                f"imageTag={tag}",
                "--query",
                "images[].imageManifest",
                "--output",
                "text",
            ]
        )

    def put_image(self, repository: str, tag: str, manifest_path: Path) -> CommandResult:
        """Push an existing manifest under a new tag."""
        return self._runner.run(
            [
                "aws",
                "ecr",
                "put-image",
                "--repository-name",
                repository,
                "--image-tag",
                tag,
                "--image-manifest",
                f"file://{manifest_path}",
            ]
        )
