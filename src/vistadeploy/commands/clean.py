"""Clean web UI build artifacts command"""
from vistadeploy.core import (
    ConsoleLogger,
    FileSystemService,
    Logger,
    ProcessExecutor,
    RealFileSystemService,
    SubprocessExecutor,
)
from vistadeploy.exceptions import ConfigError
from vistadeploy.utils.config import DeployConfig, add_common_arguments, config_from_args


def clean_webui(
    config: DeployConfig,
    filesystem: FileSystemService,
    process_executor: ProcessExecutor,
    logger: Logger
) -> bool:
    """
    Remove the web UI dist directory.

    The containerised build leaves root-owned files behind, so removal goes
    through a throwaway alpine container first and falls back to a local
    rmtree when docker is unavailable or fails.

    Returns:
        True if something was removed, False if there was nothing to clean
    """
    dist = config.webui_dist
    if not filesystem.is_dir(dist):
        logger.info("No web UI build artifacts to clean")
        return False

    source = dist.parent.resolve()
    result = process_executor.run([
        'docker', 'run', '--rm',
        '-v', f"{source}:/output",
        'alpine:latest',
        'sh', '-c', 'rm -rf /output/dist'
    ])

    if not result.ok or filesystem.exists(dist):
        logger.debug(f"docker cleanup unavailable ({result.returncode}), removing locally")
        filesystem.rmtree(dist)

    logger.info(f"Cleaned {dist}")
    return True


def setup_parser(parser):
    """Setup argument parser for clean command"""
    add_common_arguments(parser)


def execute(args):
    """Execute clean command"""
    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    print("Cleaning web UI build artifacts...")
    try:
        clean_webui(
            config,
            filesystem=RealFileSystemService(),
            process_executor=SubprocessExecutor(),
            logger=ConsoleLogger(verbose=args.verbose)
        )
    except OSError as e:
        print(f"Error: Could not clean {config.webui_dist}: {e}")
        return 1

    return 0
