"""
Unit tests for SSHDeployer.

The process executor is scripted per command (scp / opkg / rm) so each
failure point of a deployment can be exercised on its own.
"""

import pytest
from pathlib import Path
from unittest.mock import Mock

from vistadeploy.core.protocols import FileSystemService, Logger, ProcessExecutor, ProcessResult
from vistadeploy.deploy import CleanupResult, Deployer, RemoteTarget, SSHDeployer
from vistadeploy.exceptions import (
    ArtifactNotFoundError,
    InstallFailedError,
    ToolchainUnavailableError,
    TransferFailedError,
)
from vistadeploy.utils.locator import ArtifactLocator

IPK = Path("build/tmp/deploy/ipk/cortexa53/vista-web-ui_1.2.3.ipk")
TARGET = RemoteTarget(host="192.168.1.100")


def create_mock_process(responses=None):
    """
    Mock ProcessExecutor; responses maps a substring of the joined command
    to (returncode, stdout, stderr). Unmatched commands succeed.
    """
    process = Mock(spec=ProcessExecutor)
    responses = responses or {}

    def mock_run(cmd, **kwargs):
        cmd_str = ' '.join(cmd)
        for fragment, (returncode, stdout, stderr) in responses.items():
            if fragment in cmd_str:
                return ProcessResult(cmd=list(cmd), returncode=returncode, stdout=stdout, stderr=stderr)
        return ProcessResult(cmd=list(cmd), returncode=0)

    process.run.side_effect = mock_run
    return process


def create_mock_filesystem(files=()):
    fs = Mock(spec=FileSystemService)
    fs.is_file.side_effect = lambda path: str(path) in {str(f) for f in files}
    return fs


def commands(process):
    return [' '.join(c[0][0]) for c in process.run.call_args_list]


class TestSSHDeployerCommands:
    """Test command construction."""

    def setup_method(self):
        self.deployer = SSHDeployer(
            filesystem=create_mock_filesystem(),
            process_executor=create_mock_process(),
            logger=Mock(spec=Logger),
            locator=Mock(spec=ArtifactLocator),
            search_dir="build/tmp/deploy/ipk",
            pattern="vista-web-ui_*.ipk",
        )

    def test_satisfies_deployer_protocol(self):
        assert isinstance(self.deployer, Deployer)

    def test_ssh_cmd_construction(self):
        target = RemoteTarget(host="gw.local", ssh_port=2222)

        cmd = self.deployer._ssh_cmd(target, "echo test")

        assert cmd == ['ssh', '-p', '2222', 'root@gw.local', 'echo test']

    def test_scp_cmd_construction(self):
        cmd = self.deployer._scp_cmd(IPK, TARGET)

        assert cmd == ['scp', '-P', '22', str(IPK), 'root@192.168.1.100:/tmp/vista-web-ui.ipk']

    def test_scp_brackets_ipv6(self):
        target = RemoteTarget(host="fe80::1")

        assert self.deployer._scp_cmd(IPK, target)[-1] == 'root@[fe80::1]:/tmp/vista-web-ui.ipk'

    def test_ssh_options_passed_to_both(self):
        self.deployer.ssh_options = ['-o', 'BatchMode=yes']

        assert self.deployer._ssh_cmd(TARGET, "true")[3:5] == ['-o', 'BatchMode=yes']
        assert self.deployer._scp_cmd(IPK, TARGET)[3:5] == ['-o', 'BatchMode=yes']


class TestSSHDeployerDeploy:
    """Test the deploy sequence and its failure points."""

    def make_deployer(self, process, files=(IPK,), found=IPK, repackage=None):
        self.locator = Mock(spec=ArtifactLocator)
        self.locator.find.return_value = found
        self.logger = Mock(spec=Logger)
        return SSHDeployer(
            filesystem=create_mock_filesystem(files),
            process_executor=process,
            logger=self.logger,
            locator=self.locator,
            search_dir="build/tmp/deploy/ipk",
            pattern="vista-web-ui_*.ipk",
            repackage=repackage,
        )

    def test_happy_path_order(self):
        process = create_mock_process()
        deployer = self.make_deployer(process)
        steps = []

        result = deployer.deploy(IPK, TARGET, progress=steps.append)

        assert result.target == TARGET
        assert result.artifact == IPK
        assert result.cleanup.success
        assert steps == ["locate", "transfer", "install", "cleanup"]

        issued = commands(process)
        assert len(issued) == 3
        assert issued[0].startswith("scp")
        assert ("opkg install --force-reinstall /tmp/vista-web-ui.ipk "
                "&& systemctl restart lighttpd") in issued[1]
        assert "rm -f /tmp/vista-web-ui.ipk" in issued[2]

    def test_locates_when_no_artifact_given(self):
        process = create_mock_process()
        deployer = self.make_deployer(process)

        result = deployer.deploy(None, TARGET)

        assert result.artifact == IPK
        self.locator.find.assert_called_with("build/tmp/deploy/ipk", "vista-web-ui_*.ipk")

    def test_repackages_once_then_deploys(self):
        process = create_mock_process()
        repackage = Mock()
        deployer = self.make_deployer(process, files=(), found=None, repackage=repackage)

        def produce_ipk():
            deployer.fs.is_file.side_effect = lambda path: str(path) == str(IPK)
            self.locator.find.return_value = IPK
        repackage.side_effect = produce_ipk

        result = deployer.deploy(None, TARGET)

        repackage.assert_called_once()
        assert result.artifact == IPK

    def test_no_artifact_after_repackage_fails_without_transfer(self):
        process = create_mock_process()
        repackage = Mock()
        deployer = self.make_deployer(process, files=(), found=None, repackage=repackage)

        with pytest.raises(ArtifactNotFoundError):
            deployer.deploy(None, TARGET)

        repackage.assert_called_once()
        process.run.assert_not_called()

    def test_repackage_build_error_becomes_artifact_not_found(self):
        process = create_mock_process()
        repackage = Mock(side_effect=ToolchainUnavailableError("kas", "vistadeploy image"))
        deployer = self.make_deployer(process, files=(), found=None, repackage=repackage)

        with pytest.raises(ArtifactNotFoundError):
            deployer.deploy(None, TARGET)

        process.run.assert_not_called()

    def test_stale_artifact_path_triggers_repackage(self):
        process = create_mock_process()
        repackage = Mock()
        deployer = self.make_deployer(process, files=(), found=None, repackage=repackage)

        with pytest.raises(ArtifactNotFoundError):
            deployer.deploy(IPK, TARGET)

        repackage.assert_called_once()

    def test_unreachable_host_fails_transfer(self):
        process = create_mock_process({
            "scp": (255, "", "ssh: connect to host 192.168.1.100 port 22: No route to host")
        })
        deployer = self.make_deployer(process)

        with pytest.raises(TransferFailedError) as exc_info:
            deployer.deploy(IPK, TARGET)

        message = str(exc_info.value)
        assert "No route to host" in message
        assert "ping 192.168.1.100" in message
        assert "ssh-copy-id" in message
        # Nothing else touched the device
        assert len(commands(process)) == 1

    def test_install_failure_still_cleans_up(self):
        process = create_mock_process({
            "opkg": (1, "", "Collected errors: * opkg_install_cmd: Cannot install package")
        })
        deployer = self.make_deployer(process)
        steps = []

        with pytest.raises(InstallFailedError) as exc_info:
            deployer.deploy(IPK, TARGET, progress=steps.append)

        assert exc_info.value.exit_code == 1
        assert steps == ["locate", "transfer", "install"]
        assert any("rm -f" in c for c in commands(process))

    def test_install_and_cleanup_failure_reports_install(self):
        process = create_mock_process({
            "opkg": (1, "", "opkg failed"),
            "rm -f": (255, "", "Connection reset"),
        })
        deployer = self.make_deployer(process)

        with pytest.raises(InstallFailedError):
            deployer.deploy(IPK, TARGET)

        self.logger.warning.assert_called()

    def test_cleanup_failure_does_not_fail_deploy(self):
        process = create_mock_process({"rm -f": (255, "", "Connection closed")})
        deployer = self.make_deployer(process)

        result = deployer.deploy(IPK, TARGET)

        assert result.target == TARGET
        assert not result.cleanup.success
        assert result.warnings
        assert "Connection closed" in result.warnings[0]
        self.logger.warning.assert_called_once()


class TestSSHDeployerCleanup:
    """Test cleanup never raises."""

    def test_cleanup_ok(self):
        deployer = SSHDeployer(
            create_mock_filesystem(), create_mock_process(), Mock(spec=Logger),
            Mock(spec=ArtifactLocator), "d", "p"
        )

        assert deployer.cleanup(TARGET) == CleanupResult(success=True, errors=[])

    def test_cleanup_oserror_captured(self):
        process = Mock(spec=ProcessExecutor)
        process.run.side_effect = OSError("ssh not found")
        deployer = SSHDeployer(
            create_mock_filesystem(), process, Mock(spec=Logger),
            Mock(spec=ArtifactLocator), "d", "p"
        )

        result = deployer.cleanup(TARGET)

        assert not result.success
        assert "ssh not found" in result.errors[0]

    def test_remote_path_is_quoted(self):
        process = create_mock_process()
        deployer = SSHDeployer(
            create_mock_filesystem(), process, Mock(spec=Logger),
            Mock(spec=ArtifactLocator), "d", "p"
        )

        deployer.cleanup(RemoteTarget(host="h", remote_path="/tmp/my file.ipk"))

        assert "rm -f '/tmp/my file.ipk'" in commands(process)[0]
