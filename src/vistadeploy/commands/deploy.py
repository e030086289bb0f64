"""Deploy web UI to the target device command"""
from vistadeploy.exceptions import ConfigError
from vistadeploy.pipeline import create_pipeline, report_result
from vistadeploy.utils.config import add_common_arguments, config_from_args


def setup_parser(parser):
    """Setup argument parser for deploy command"""
    parser.add_argument(
        '--target-ip',
        help='Target device IP/hostname, optionally user@host:port '
             '(default: $TARGET_IP or vista-00018.local)'
    )
    parser.add_argument(
        '--ssh-port',
        type=int,
        help='SSH port on the device (default: 22)'
    )
    parser.add_argument(
        '--repackage',
        action='store_true',
        help='Rebuild the IPK even if one is already in the deploy tree'
    )
    add_common_arguments(parser)


def execute(args):
    """Execute deploy command: validate → build → package → ship"""
    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    print("=" * 80)
    print(f"Deploying Vista Web UI to {config.target_ip or '(unset)'}")
    print("=" * 80)

    pipeline = create_pipeline(config, verbose=args.verbose)
    result = pipeline.run('deploy', force_package=args.repackage)
    code = report_result(result, "Deployment")

    if result.success:
        print("\nWeb UI should now be available at:")
        for url in result.deployment.target.urls:
            print(f"  {url}")
    return code
