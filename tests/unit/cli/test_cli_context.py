"""Tests for CLI context dependency injection."""

from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import pytest
import typer

from chartops.cli.context import CLIContext, build_cli_context, get_cli_context
from chartops.cli.deployment.errors import DeploymentError
from chartops.runtime.config import Settings


def _context(**overrides: object) -> CLIContext:
    values: dict[str, object] = {
        "console": Mock(),
        "project_root": Path("/test"),
        "settings": Settings(),
        "commands": MagicMock(),
        "inspector": MagicMock(),
    }
    values.update(overrides)
    return CLIContext(**values)  # type: ignore[arg-type]


def test_cli_context_is_immutable() -> None:
    ctx = _context()

    with pytest.raises(AttributeError):
        ctx.console = Mock()  # type: ignore[misc]


def test_build_cli_context_creates_all_dependencies(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("DEBUG", raising=False)
    (tmp_path / "chartops.yaml").write_text("config:\n  app_pod_pattern: '^web-'\n")

    with patch("chartops.cli.context.configure_logging") as mock_logging:
        ctx = build_cli_context(tmp_path)

    assert ctx.project_root == tmp_path
    assert ctx.commands.project_root == tmp_path
    assert ctx.settings.app_pod_pattern == "^web-"
    assert ctx.inspector.app_pod_pattern == "^web-"
    assert ctx.inspector.kubectl is ctx.commands.kubectl
    mock_logging.assert_called_once_with(False)


def test_build_cli_context_reports_invalid_configuration(tmp_path: Path) -> None:
    (tmp_path / "chartops.yaml").write_text("config:\n  unknown: 1\n")

    with pytest.raises(DeploymentError, match="Invalid configuration"):
        build_cli_context(tmp_path)


def test_resolvers_follow_settings() -> None:
    ctx = _context(settings=Settings(registry_max_items=20, version_sort="semantic"))

    resolver = ctx.version_resolver()

    assert resolver.max_items == 20
    assert resolver.order == "semantic"
    assert resolver.ecr is ctx.commands.ecr


def test_secret_validator_uses_configured_name() -> None:
    ctx = _context(settings=Settings(secret_name="payments-env"))

    assert ctx.secret_validator().secret_name("staging") == "payments-env"
    ctx.inspector.resolve_secret_name.assert_not_called()


def test_get_cli_context_from_typer_context() -> None:
    ctx_obj = _context()
    typer_ctx = Mock(spec=typer.Context)
    typer_ctx.obj = ctx_obj

    assert get_cli_context(typer_ctx) is ctx_obj


def test_get_cli_context_with_none_falls_back() -> None:
    with patch("chartops.cli.context.build_cli_context") as mock_build:
        mock_build.return_value = Mock(spec=CLIContext)

        get_cli_context(None)

    mock_build.assert_called_once()


def test_database_tunnel_yields_local_url() -> None:
    ctx = _context()

    with (
        patch("chartops.cli.context.resolve_database_url", return_value="postgres://l/db") as r,
        patch("chartops.cli.context.port_forward") as mock_forward,
    ):
        with ctx.database_tunnel("staging") as url:
            assert url == "postgres://l/db"

    assert r.call_args.kwargs == {"host": "127.0.0.1", "port": 54320}
    args, kwargs = mock_forward.call_args
    assert args == ("staging", "postgres")
    assert kwargs["local_port"] == 54320
    assert kwargs["remote_port"] == 5432
