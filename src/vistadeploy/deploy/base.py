"""
Deployer Protocol - interface for shipping a packaged artifact to a device.

Only SSH (scp + ssh) is implemented; the protocol keeps the Pipeline
independent of the transport so tests can swap in a double.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Protocol, Optional, runtime_checkable


@dataclass(frozen=True)
class RemoteTarget:
    """
    A device and the fixed locations used on it.

    Attributes:
        host: IP or hostname (e.g., "192.168.1.100" or "vista-00018.local")
        user: SSH login (default: root)
        ssh_port: SSH port (default: 22)
        remote_path: Where the artifact is copied before install
        service: systemd unit restarted after install
    """
    host: str
    user: str = "root"
    ssh_port: int = 22
    remote_path: str = "/tmp/vista-web-ui.ipk"
    service: str = "lighttpd"

    @property
    def login(self) -> str:
        return f"{self.user}@{self.host}"

    @property
    def bracketed_host(self) -> str:
        # IPv6 literals need brackets in scp destinations and URLs
        return f"[{self.host}]" if ':' in self.host else self.host

    @property
    def scp_destination(self) -> str:
        return f"{self.user}@{self.bracketed_host}:{self.remote_path}"

    @property
    def urls(self) -> list[str]:
        return [f"https://{self.bracketed_host}", f"https://{self.bracketed_host}/login"]


@dataclass
class CleanupResult:
    """
    Result of the advisory cleanup step.

    Attributes:
        success: Whether cleanup succeeded
        errors: Non-fatal issues encountered during cleanup
    """
    success: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class DeploymentResult:
    """
    Result of a successful deployment.

    Attributes:
        artifact: Local artifact that was installed
        target: Device it was installed on
        cleanup: Outcome of removing the remote temp file (never affects success)
    """
    artifact: Path
    target: RemoteTarget
    cleanup: CleanupResult

    @property
    def warnings(self) -> list[str]:
        return list(self.cleanup.errors)


@runtime_checkable
class Deployer(Protocol):
    """
    Interface for deployment strategies.

    Implementations:
        - SSHDeployer: scp + opkg install + systemctl restart
    """

    def deploy(
        self,
        artifact: Optional[Path],
        target: RemoteTarget,
        progress: Optional[Callable[[str], None]] = None
    ) -> DeploymentResult:
        """
        Transfer artifact to target, install it and restart the service.

        progress, if given, is called with "locate", "transfer", "install"
        and "cleanup" as each step starts.

        Raises:
            DeployError: If locate, transfer or install fails

        Postconditions:
            - Package installed and service restarted
            - Remote temp file removal attempted (result in DeploymentResult.cleanup)
        """
        ...

    def cleanup(self, target: RemoteTarget) -> CleanupResult:
        """
        Remove the remote temp artifact.

        Note:
            Must not raise exceptions (errors go in CleanupResult.errors)
        """
        ...
