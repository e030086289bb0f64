"""
Parse device strings into RemoteTargets.

Accepted TARGET_IP forms:
    host                  → root@host:22
    host:2222             → root@host:2222
    user@host             → user@host:22
    user@[fe80::1]:2222   → IPv6 with custom port
    fe80::1               → bare IPv6 literal, port 22
"""

from vistadeploy.deploy.base import RemoteTarget
from vistadeploy.utils.config import DeployConfig


def parse_device(device: str, default_user: str = "root", default_port: int = 22):
    """
    Split a device string into (user, host, port).

    Raises:
        ValueError: If the string is empty or malformed
    """
    device = (device or "").strip()
    if not device:
        raise ValueError("Empty device string")

    user = default_user
    host_part = device
    if '@' in device:
        user, host_part = device.split('@', 1)
        if not user:
            raise ValueError(f"Missing user before '@': {device}")

    port = default_port
    if host_part.startswith('['):
        bracket_end = host_part.find(']')
        if bracket_end == -1:
            raise ValueError(f"Malformed IPv6 address: {device}")
        host = host_part[1:bracket_end]
        remainder = host_part[bracket_end + 1:]
        if remainder:
            if not remainder.startswith(':'):
                raise ValueError(f"Unexpected text after IPv6 address: {device}")
            port = _port(remainder[1:], device)
    elif host_part.count(':') == 1:
        host, port_str = host_part.rsplit(':', 1)
        port = _port(port_str, device)
    else:
        # Plain hostname/IPv4, or a bare IPv6 literal
        host = host_part

    if not host:
        raise ValueError(f"Missing host: {device}")

    return user, host, port


def _port(value: str, device: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ValueError(f"Invalid port in {device}: {value!r}")
    if not 0 < port < 65536:
        raise ValueError(f"Port out of range in {device}: {port}")
    return port


def target_from_config(config: DeployConfig) -> RemoteTarget:
    """Build the RemoteTarget for this invocation from the resolved config."""
    user, host, port = parse_device(
        config.target_ip,
        default_user=config.ssh_user,
        default_port=config.ssh_port
    )
    return RemoteTarget(
        host=host,
        user=user,
        ssh_port=port,
        remote_path=config.remote_path,
        service=config.service,
    )
