"""Build the React web UI command"""
from vistadeploy.exceptions import ConfigError
from vistadeploy.pipeline import create_pipeline, report_result
from vistadeploy.utils.config import add_common_arguments, config_from_args


def setup_parser(parser):
    """Setup argument parser for build command"""
    add_common_arguments(parser)


def execute(args):
    """Execute build command"""
    print("=" * 80)
    print("Building Vista Web UI")
    print("=" * 80)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    result = create_pipeline(config, verbose=args.verbose).run('build')
    if result.success:
        print(f"\nWeb UI built successfully: {config.webui_dist}")
    return report_result(result, "Build")
