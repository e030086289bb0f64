"""Build the full Yocto image using kas command"""
from vistadeploy.core import ConsoleLogger, RealFileSystemService, SubprocessExecutor
from vistadeploy.exceptions import ConfigError, VistaDeployError
from vistadeploy.pipeline import create_pipeline, report_result
from vistadeploy.utils.config import add_common_arguments, config_from_args
from vistadeploy.utils.stages import ImageStage


def setup_parser(parser):
    """Setup argument parser for image command"""
    add_common_arguments(parser)


def execute(args):
    """Execute image command: build web UI, then kas-build.sh build"""
    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    result = create_pipeline(config, verbose=args.verbose).run('build')
    if not result.success:
        return report_result(result, "Web UI build")

    print("=" * 80)
    print("Building Vista Image with kas")
    print("=" * 80)
    print("Note: kas-build.sh validates MENDER_TOKEN and SCRIPT_SIGNING_KEY")
    print()

    stage = ImageStage(
        config,
        filesystem=RealFileSystemService(),
        process_executor=SubprocessExecutor(),
        logger=ConsoleLogger(verbose=args.verbose),
        verbose=args.verbose
    )
    try:
        stage.run()
    except VistaDeployError as e:
        print(f"\n✗ Image build failed: {e}")
        return 1

    return 0
