"""
Device deployment subsystem.

Ships a packaged IPK to a Vista gateway:
    - SSHDeployer: scp + opkg install + systemctl restart + rm temp

Public API:
    - Deployer: Protocol interface
    - RemoteTarget: Device address and fixed remote paths
    - DeploymentResult, CleanupResult: Result types
    - parse_device, target_from_config: Device string parsing
    - SSHDeployer: SSH deployment implementation
"""

from .base import Deployer, RemoteTarget, DeploymentResult, CleanupResult
from .factory import parse_device, target_from_config
from .ssh_deployer import SSHDeployer

__all__ = [
    # Protocol and types
    "Deployer",
    "RemoteTarget",
    "DeploymentResult",
    "CleanupResult",

    # Factory
    "parse_device",
    "target_from_config",

    # Implementations
    "SSHDeployer",
]
