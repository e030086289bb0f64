"""
SSHDeployer - Install the web UI package on a device over SSH.

Strategy: scp IPK → opkg install --force-reinstall && systemctl restart → rm temp
"""

import logging
import shlex
from pathlib import Path
from typing import Callable, Optional, Sequence, Any, Union

from vistadeploy.core.protocols import FileSystemService, Logger, ProcessExecutor
from vistadeploy.exceptions import (
    ArtifactNotFoundError,
    BuildError,
    InstallFailedError,
    TransferFailedError,
)
from vistadeploy.utils.locator import ArtifactLocator
from .base import CleanupResult, DeploymentResult, RemoteTarget

logger = logging.getLogger(__name__)


class SSHDeployer:
    """
    Deploys via SSH: locate → scp → install + restart → cleanup.

    Target devices: Vista gateways (root login, opkg, systemd)
    Requirements: passwordless SSH (key-based) to the device
    """

    def __init__(
        self,
        filesystem: FileSystemService,
        process_executor: ProcessExecutor,
        logger: Logger,
        locator: ArtifactLocator,
        search_dir: Union[str, Path],
        pattern: str,
        repackage: Optional[Callable[[], Any]] = None,
        ssh_options: Sequence[str] = ()
    ):
        """
        Initialize SSH deployer.

        Args:
            filesystem: Used to confirm the local artifact exists
            process_executor: Runs scp/ssh
            logger: Progress and warning output
            locator: Finds the artifact in search_dir
            search_dir: Deploy tree holding packaged artifacts
            pattern: Artifact file name glob (e.g., "vista-web-ui_*.ipk")
            repackage: Re-runs the packaging stage; called at most once per
                deploy when no artifact is found
            ssh_options: Extra options passed to both scp and ssh
                (e.g., ["-o", "BatchMode=yes"])
        """
        self.fs = filesystem
        self.process = process_executor
        self.log = logger
        self.locator = locator
        self.search_dir = search_dir
        self.pattern = pattern
        self.repackage = repackage
        self.ssh_options = list(ssh_options)

    def locate(self) -> Optional[Path]:
        return self.locator.find(self.search_dir, self.pattern)

    def _ssh_cmd(self, target: RemoteTarget, command: str) -> list[str]:
        """Build SSH command with custom port."""
        return [
            "ssh",
            "-p", str(target.ssh_port),
            *self.ssh_options,
            target.login,
            command
        ]

    def _scp_cmd(self, artifact: Path, target: RemoteTarget) -> list[str]:
        return [
            "scp",
            "-P", str(target.ssh_port),
            *self.ssh_options,
            str(artifact),
            target.scp_destination
        ]

    def _has_artifact(self, artifact: Optional[Path]) -> bool:
        return artifact is not None and self.fs.is_file(artifact)

    def resolve_artifact(self, artifact: Optional[Path]) -> Path:
        """
        Return a local artifact, re-packaging once if none is present.

        Raises:
            ArtifactNotFoundError: Still nothing after the re-package attempt
        """
        if self._has_artifact(artifact):
            return Path(artifact)

        if artifact is None:
            artifact = self.locate()
            if self._has_artifact(artifact):
                return Path(artifact)

        self.log.error("IPK package not found. Building package...")
        if self.repackage is not None:
            try:
                self.repackage()
            except BuildError as e:
                self.log.error(str(e))
            artifact = self.locate()
            if self._has_artifact(artifact):
                return Path(artifact)

        raise ArtifactNotFoundError(self.search_dir, self.pattern)

    def transfer(self, artifact: Path, target: RemoteTarget) -> None:
        """
        Copy artifact to target.remote_path.

        Raises:
            TransferFailedError: scp failed (unreachable, auth, bad path)
        """
        self.log.info(f"Found IPK: {artifact}")
        self.log.info("Copying to target device...")
        result = self.process.run(self._scp_cmd(artifact, target))
        if not result.ok:
            port = f"-p {target.ssh_port} " if target.ssh_port != 22 else ""
            raise TransferFailedError(
                result.tail(5) or f"scp exited with {result.returncode}",
                hints=(
                    f"Check:\n"
                    f"  1. Device is reachable: ping {target.host}\n"
                    f"  2. SSH access is configured: ssh-copy-id {port}{target.login}\n"
                    f"  3. TARGET_IP is correct (current: {target.host})"
                )
            )

    def install(self, target: RemoteTarget) -> None:
        """
        Install the copied package and restart the service in one SSH call.

        The restart only runs if opkg succeeds.

        Raises:
            InstallFailedError: opkg or systemctl failed
        """
        self.log.info("Installing package on device...")
        remote_path = shlex.quote(target.remote_path)
        command = (
            f"opkg install --force-reinstall {remote_path} && "
            f"systemctl restart {shlex.quote(target.service)}"
        )
        result = self.process.run(self._ssh_cmd(target, command))
        if not result.ok:
            raise InstallFailedError(result.returncode, details=result.tail())

    def cleanup(self, target: RemoteTarget) -> CleanupResult:
        """
        Delete the remote temp artifact.

        Returns:
            CleanupResult; failures are logged as warnings, never raised
        """
        self.log.info("Cleaning up temporary file...")
        errors = []
        try:
            result = self.process.run(
                self._ssh_cmd(target, f"rm -f {shlex.quote(target.remote_path)}")
            )
            if not result.ok:
                errors.append(
                    f"Failed to remove {target.remote_path} on {target.host}: "
                    f"{result.tail(3) or f'exit code {result.returncode}'}"
                )
        except OSError as e:
            errors.append(f"Failed to remove {target.remote_path} on {target.host}: {e}")

        for error in errors:
            self.log.warning(error)

        return CleanupResult(success=len(errors) == 0, errors=errors)

    def deploy(
        self,
        artifact: Optional[Path],
        target: RemoteTarget,
        progress: Optional[Callable[[str], None]] = None
    ) -> DeploymentResult:
        """
        Deploy via SSH: locate → transfer → install + restart → cleanup.

        Steps:
            1. Locate the artifact (one re-package attempt if missing)
            2. scp to target.remote_path
            3. ssh "opkg install --force-reinstall ... && systemctl restart ..."
            4. ssh "rm -f ..." (advisory; attempted even if step 3 failed)

        Args:
            artifact: Artifact found by the caller, or None
            target: Device to deploy to
            progress: Called with "locate", "transfer", "install" and
                "cleanup" as each step starts

        Raises:
            ArtifactNotFoundError: No artifact; nothing was sent to the device
            TransferFailedError: scp failed; install/cleanup not attempted
            InstallFailedError: Install or restart failed; no rollback is done
        """
        step = progress or (lambda name: None)

        step("locate")
        artifact = self.resolve_artifact(artifact)

        step("transfer")
        self.transfer(artifact, target)

        step("install")
        try:
            self.install(target)
        except InstallFailedError:
            self.cleanup(target)
            raise

        step("cleanup")
        cleanup = self.cleanup(target)
        logger.debug("deployed %s to %s (cleanup ok=%s)", artifact, target.login, cleanup.success)
        return DeploymentResult(artifact=artifact, target=target, cleanup=cleanup)
