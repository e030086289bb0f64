"""Check whether the web UI is built"""
from vistadeploy.core import (
    ConsoleLogger,
    FileSystemService,
    RealFileSystemService,
    SubprocessExecutor,
)
from vistadeploy.exceptions import ConfigError
from vistadeploy.utils.config import DeployConfig, add_common_arguments, config_from_args
from vistadeploy.utils.stages import StageRunner, webui_target

MAX_LISTED = 5


def check_build(config: DeployConfig, filesystem: FileSystemService, runner: StageRunner) -> int:
    """Report build state; 0 if dist/index.html exists, 1 otherwise."""
    target = webui_target(config)
    if runner.missing_outputs(target):
        print("✗ Web UI is not built. Run 'vistadeploy build'")
        return 1

    print("✓ Web UI is built")
    print(f"  {target.marker_path}")
    assets = target.output_dir / "assets"
    if filesystem.is_dir(assets):
        for entry in sorted(filesystem.iterdir(assets))[:MAX_LISTED - 1]:
            print(f"  {entry}")
    return 0


def setup_parser(parser):
    """Setup argument parser for check-build command"""
    add_common_arguments(parser)


def execute(args):
    """Execute check-build command"""
    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    filesystem = RealFileSystemService()
    runner = StageRunner(filesystem, SubprocessExecutor(), ConsoleLogger(verbose=args.verbose))
    return check_build(config, filesystem, runner)
