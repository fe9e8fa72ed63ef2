"""Unit tests for ChartDeployer (Helm upgrade, rollback and restart)."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from chartops.cli.deployment.chart_deployer import (
    ChartDeployer,
    ClusterInspector,
    VersionResolver,
    load_chart_context,
)
from chartops.cli.deployment.chart_deployer.versions import RollbackTarget
from chartops.cli.deployment.errors import IdentityMismatchError
from chartops.cli.deployment.shell_commands import (
    HelmCommands,
    KubectlCommands,
    ShellCommands,
)
from tests.helpers import ok


@pytest.fixture
def mock_commands(mock_runner: MagicMock) -> MagicMock:
    commands = MagicMock(spec=ShellCommands)
    commands.runner = mock_runner
    commands.helm = MagicMock()
    commands.helm.upgrade.return_value = ok('Release "staging" has been upgraded.\n')
    commands.kubectl = MagicMock(spec=KubectlCommands)
    commands.kubectl.rollout_restart.return_value = "deployment.apps/web restarted"
    commands.ecr = MagicMock()
    return commands


@pytest.fixture
def inspector() -> MagicMock:
    mock = MagicMock(spec=ClusterInspector)
    mock.resolve_deployed_image.return_value = "registry/payments:staging-2.4.0"
    return mock


@pytest.fixture
def resolver() -> MagicMock:
    return MagicMock(spec=VersionResolver)


def _deployer(
    root: Path, commands: MagicMock, inspector: MagicMock, resolver: MagicMock
) -> ChartDeployer:
    return ChartDeployer(
        commands=commands,
        chart=load_chart_context(root),
        inspector=inspector,
        resolver=resolver,
        console=MagicMock(),
    )


class TestUpgrade:
    """Tests for ChartDeployer.upgrade."""

    def test_redeploys_running_version_with_environment_values(
        self,
        write_chart: Callable[..., Path],
        mock_commands: MagicMock,
        inspector: MagicMock,
        resolver: MagicMock,
    ) -> None:
        root = write_chart(api_version="v1")
        deployer = _deployer(root, mock_commands, inspector, resolver)

        deployed = deployer.upgrade("staging")

        assert deployed == "2.4.0"
        mock_commands.helm.upgrade.assert_called_once_with(
            "staging",
            root / "chart" / "payments",
            root / "chart" / "payments" / "values.staging.yaml",
            "2.4.0",
            namespace=None,
            recreate_pods=False,
        )

    def test_end_to_end_command_line(
        self,
        write_chart: Callable[..., Path],
        mock_runner: MagicMock,
        inspector: MagicMock,
        resolver: MagicMock,
    ) -> None:
        root = write_chart(api_version="v1")
        commands = MagicMock(spec=ShellCommands)
        commands.helm = HelmCommands(mock_runner)
        deployer = _deployer(root, commands, inspector, resolver)

        deployer.upgrade("staging")

        cmd = mock_runner.run.call_args[0][0]
        assert cmd[:3] == ["helm", "upgrade", "staging"]
        assert "--set=image.tag=2.4.0" in cmd
        assert cmd[cmd.index("-f") + 1].endswith("values.staging.yaml")

    def test_explicit_version(
        self,
        write_chart: Callable[..., Path],
        mock_commands: MagicMock,
        inspector: MagicMock,
        resolver: MagicMock,
    ) -> None:
        deployer = _deployer(write_chart(), mock_commands, inspector, resolver)

        assert deployer.upgrade("staging", "2.5.0") == "2.5.0"
        assert mock_commands.helm.upgrade.call_args[0][3] == "2.5.0"

    def test_v1_recreate_pods_uses_helm_flag(
        self,
        write_chart: Callable[..., Path],
        mock_commands: MagicMock,
        inspector: MagicMock,
        resolver: MagicMock,
    ) -> None:
        deployer = _deployer(write_chart(api_version="v1"), mock_commands, inspector, resolver)

        deployer.upgrade("staging", recreate_pods=True)

        kwargs = mock_commands.helm.upgrade.call_args.kwargs
        assert kwargs == {"namespace": None, "recreate_pods": True}
        mock_commands.kubectl.rollout_restart.assert_not_called()

    def test_v2_adds_namespace_and_restarts(
        self,
        write_chart: Callable[..., Path],
        mock_commands: MagicMock,
        inspector: MagicMock,
        resolver: MagicMock,
    ) -> None:
        deployer = _deployer(write_chart(api_version="v2"), mock_commands, inspector, resolver)

        deployer.upgrade("staging", recreate_pods=True)

        kwargs = mock_commands.helm.upgrade.call_args.kwargs
        assert kwargs == {"namespace": "staging", "recreate_pods": False}
        mock_commands.kubectl.rollout_restart.assert_called_once_with("staging")

    def test_identity_mismatch_never_calls_helm(
        self,
        write_chart: Callable[..., Path],
        mock_commands: MagicMock,
        inspector: MagicMock,
        resolver: MagicMock,
    ) -> None:
        inspector.resolve_deployed_image.return_value = "registry/billing:staging-2.4.0"
        deployer = _deployer(write_chart(), mock_commands, inspector, resolver)

        with pytest.raises(IdentityMismatchError):
            deployer.upgrade("staging")

        mock_commands.helm.upgrade.assert_not_called()


class TestRollback:
    """Tests for ChartDeployer.rollback."""

    def test_retags_in_environment_repository(
        self,
        write_chart: Callable[..., Path],
        mock_commands: MagicMock,
        inspector: MagicMock,
        resolver: MagicMock,
    ) -> None:
        target = RollbackTarget(
            repository="payments/staging",
            base_version="2.3.0",
            current_version="2.4.0",
            new_tag="2.4.1-rc.1",
        )
        resolver.resolve_rollback_target.return_value = target
        deployer = _deployer(write_chart(), mock_commands, inspector, resolver)

        result = deployer.rollback("staging")

        assert result is target
        resolver.resolve_rollback_target.assert_called_once_with("payments/staging", None)
        resolver.retag.assert_called_once_with("payments/staging", "2.3.0", "2.4.1-rc.1")

    def test_mismatch_stops_before_registry(
        self,
        write_chart: Callable[..., Path],
        mock_commands: MagicMock,
        inspector: MagicMock,
        resolver: MagicMock,
    ) -> None:
        inspector.resolve_deployed_image.return_value = "registry/billing:staging-2.4.0"
        deployer = _deployer(write_chart(), mock_commands, inspector, resolver)

        with pytest.raises(IdentityMismatchError):
            deployer.rollback("staging")

        resolver.retag.assert_not_called()


def test_restart(
    write_chart: Callable[..., Path],
    mock_commands: MagicMock,
    inspector: MagicMock,
    resolver: MagicMock,
) -> None:
    _deployer(write_chart(), mock_commands, inspector, resolver).restart("staging")

    mock_commands.kubectl.rollout_restart.assert_called_once_with("staging")
