"""Build the web UI IPK package command (requires kas)"""
from vistadeploy.exceptions import ConfigError
from vistadeploy.pipeline import create_pipeline, report_result
from vistadeploy.utils.config import add_common_arguments, config_from_args


def setup_parser(parser):
    """Setup argument parser for package command"""
    add_common_arguments(parser)


def execute(args):
    """Execute package command: build web UI, then bitbake the IPK"""
    print("=" * 80)
    print("Building Vista Web UI Package")
    print("=" * 80)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    result = create_pipeline(config, verbose=args.verbose).run('package')
    if result.success:
        print(f"\nIPK: {result.artifact}")
    return report_result(result, "Package")
