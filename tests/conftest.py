"""Shared fixtures for the chartops test suite."""

from collections.abc import Callable, Iterable
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml

from chartops.cli.deployment.shell_commands.runner import CommandRunner
from tests.helpers import REGISTRY_HOST, ok


@pytest.fixture
def mock_runner() -> MagicMock:
    """A CommandRunner double whose run() succeeds with empty output."""
    runner = MagicMock(spec=CommandRunner)
    runner.run.return_value = ok()
    runner.run_checked.return_value = ""
    return runner


@pytest.fixture
def write_chart(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing ``chart/<name>/`` under tmp_path; returns the project root.

    ``values.yaml`` declares the ``production`` environment and lists the
    secrets; every other environment gets a ``values.<env>.yaml``.
    """

    def _write(
        name: str = "payments",
        environments: Iterable[str] = ("staging",),
        *,
        api_version: str | None = "v2",
        secrets: Iterable[str] = ("DATABASE_URL", "API_KEY"),
    ) -> Path:
        chart_dir = tmp_path / "chart" / name
        chart_dir.mkdir(parents=True)
        if api_version:
            (chart_dir / "Chart.yaml").write_text(
                yaml.safe_dump({"apiVersion": api_version, "name": name, "version": "0.1.0"})
            )
        (chart_dir / "values.yaml").write_text(
            yaml.safe_dump(
                {
                    "image": {"repository": f"{REGISTRY_HOST}/{name}/production"},
                    "secrets": list(secrets),
                }
            )
        )
        for env in environments:
            (chart_dir / f"values.{env}.yaml").write_text(
                yaml.safe_dump({"image": {"repository": f"{REGISTRY_HOST}/{name}/{env}"}})
            )
        return tmp_path

    return _write
