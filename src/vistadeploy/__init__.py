"""
vistadeploy - Vista Gateway Web UI build and deployment

A command-line interface that builds the React web UI, packages it as an
IPK and installs it on a Vista gateway over SSH.
"""
import argparse
import sys

__version__ = "1.0.0"


def main():
    """Main CLI entry point"""
    from vistadeploy.commands import (
        build, package, deploy, clean,
        check_build, check_package, image, check_image
    )

    parser = argparse.ArgumentParser(
        prog='vistadeploy',
        description='Vista Gateway Build and Deployment',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  vistadeploy build                              # Build the React web UI
  vistadeploy package                            # Build web UI IPK package (requires kas)
  vistadeploy deploy --target-ip 192.168.1.100   # Build package and deploy to device
  vistadeploy clean                              # Clean web UI build artifacts
  vistadeploy image                              # Build full Yocto image using kas

Environment variables:
  TARGET_IP   Target device IP/hostname (default: vista-00018.local)
  KAS_FILE    KAS config file (default: kas/seeed-recomputer-r110x-mender.yml)
  BUILD_DIR   Build directory (default: build)
        '''
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    commands = {
        'build': (build, 'Build the React web UI'),
        'package': (package, 'Build web UI IPK package (requires kas)'),
        'deploy': (deploy, 'Build package and deploy to target device'),
        'clean': (clean, 'Clean web UI build artifacts'),
        'check-build': (check_build, 'Check if web UI is built'),
        'check-package': (check_package, 'Check if IPK package is built'),
        'image': (image, 'Build full Yocto image using kas'),
        'check-image': (check_image, 'Check if image is built'),
    }

    for name, (module, help_text) in commands.items():
        sub = subparsers.add_parser(name, help=help_text)
        module.setup_parser(sub)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Dispatch to command handler
    try:
        module, _ = commands[args.command]
        sys.exit(module.execute(args))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)
