"""Deployment configuration: CLI flags > environment > YAML file > defaults"""
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Optional, Any

from vistadeploy.core.implementations import (
    RealFileSystemService,
    SystemEnvironmentProvider,
    YamlConfigLoader,
)
from vistadeploy.core.protocols import ConfigLoader, EnvironmentProvider, FileSystemService
from vistadeploy.exceptions import ConfigError

DEFAULT_CONFIG_PATH = "vistadeploy.yaml"

# Environment variable -> DeployConfig field
ENV_VARS = {
    'TARGET_IP': 'target_ip',
    'BUILD_DIR': 'build_dir',
    'KAS_FILE': 'kas_file',
}


@dataclass(frozen=True)
class DeployConfig:
    """
    Everything the pipeline needs to know about the build tree and the device.

    Built once per invocation and passed into the Pipeline; nothing reads
    os.environ after this object exists.
    """
    target_ip: str = "vista-00018.local"
    build_dir: str = "build"
    kas_file: str = "kas/seeed-recomputer-r110x-mender.yml"
    webui_dir: str = "layers/meta-vista/recipes-extended/vista-web-ui/files"
    ssh_user: str = "root"
    ssh_port: int = 22
    remote_path: str = "/tmp/vista-web-ui.ipk"
    service: str = "lighttpd"
    recipe: str = "vista-web-ui"
    artifact_pattern: str = "vista-web-ui_*.ipk"
    artifact_order: str = "newest"

    @property
    def webui_dist(self) -> Path:
        return Path(self.webui_dir) / "dist"

    @property
    def ipk_dir(self) -> Path:
        return Path(self.build_dir) / "tmp" / "deploy" / "ipk"

    @property
    def images_dir(self) -> Path:
        return Path(self.build_dir) / "tmp" / "deploy" / "images"

    def value(self, name: str) -> Any:
        """Look up a setting by field name or by its environment variable name.

        Unknown names are unset and give None.
        """
        return getattr(self, ENV_VARS.get(name, name), None)


def _coerce(name: str, value: Any) -> Any:
    # Only target_ip may be null; EnvironmentGate reports it before deploy
    if value is None:
        if name == 'target_ip':
            return None
        raise ConfigError(f"{name} must not be empty")
    if name == 'ssh_port':
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"ssh_port must be an integer, got {value!r}")
    if name == 'artifact_order' and value not in ('newest', 'lexicographic'):
        raise ConfigError(
            f"artifact_order must be 'newest' or 'lexicographic', got {value!r}"
        )
    return str(value)


def load_config(
    overrides: Optional[Dict[str, Any]] = None,
    env_provider: Optional[EnvironmentProvider] = None,
    config_loader: Optional[ConfigLoader] = None,
    filesystem: Optional[FileSystemService] = None,
    config_path: Optional[str] = None
) -> DeployConfig:
    """Resolve a DeployConfig from all configuration sources.

    Args:
        overrides: Values from CLI flags (None entries are ignored)
        env_provider: Environment source (TARGET_IP, BUILD_DIR, KAS_FILE)
        config_loader: YAML loader for the config file
        filesystem: Used to check whether the default config file exists
        config_path: Explicit config file (must exist); defaults to
            vistadeploy.yaml in the working directory if present

    Returns:
        Resolved DeployConfig

    Raises:
        ConfigError: Unknown keys in the YAML file, explicit config file
            missing, or malformed values
    """
    known = {f.name for f in fields(DeployConfig)}
    values: Dict[str, Any] = {}

    # 1. YAML file
    path = config_path
    if path is None and filesystem is not None and filesystem.exists(DEFAULT_CONFIG_PATH):
        path = DEFAULT_CONFIG_PATH
    if path is not None:
        if config_loader is None:
            raise ConfigError(f"No config loader available to read {path}")
        if filesystem is not None and not filesystem.exists(path):
            raise ConfigError(f"Config file not found: {path}")
        data = config_loader.load_yaml(path)
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown keys in {path}: {', '.join(unknown)}")
        values.update(data)

    # 2. Environment
    if env_provider is not None:
        environ = env_provider.get_environ()
        for var, field_name in ENV_VARS.items():
            if var in environ:
                values[field_name] = environ[var]

    # 3. CLI flags
    for name, value in (overrides or {}).items():
        if value is not None:
            values[name] = value

    resolved = {name: _coerce(name, value) for name, value in values.items()}
    return replace(DeployConfig(), **resolved)


def add_common_arguments(parser) -> None:
    """Arguments shared by every command that touches the build tree"""
    parser.add_argument(
        '--build-dir',
        help='Build directory (default: $BUILD_DIR or build)'
    )
    parser.add_argument(
        '--kas-file',
        help='KAS configuration file (default: $KAS_FILE or kas/seeed-recomputer-r110x-mender.yml)'
    )
    parser.add_argument(
        '--webui-dir',
        help='Web UI source directory containing build.sh'
    )
    parser.add_argument(
        '--config',
        help=f'YAML config file (default: {DEFAULT_CONFIG_PATH} if present)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show tool output'
    )


def config_from_args(args, filesystem=None, env_provider=None, config_loader=None) -> DeployConfig:
    """Build a DeployConfig from parsed command-line arguments"""
    filesystem = filesystem or RealFileSystemService()
    overrides = {
        'target_ip': getattr(args, 'target_ip', None),
        'build_dir': getattr(args, 'build_dir', None),
        'kas_file': getattr(args, 'kas_file', None),
        'webui_dir': getattr(args, 'webui_dir', None),
        'ssh_port': getattr(args, 'ssh_port', None),
    }
    return load_config(
        overrides,
        env_provider=env_provider or SystemEnvironmentProvider(),
        config_loader=config_loader or YamlConfigLoader(filesystem),
        filesystem=filesystem,
        config_path=getattr(args, 'config', None)
    )
