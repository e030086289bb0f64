"""Check whether an IPK package is present in the deploy tree"""
from vistadeploy.core import RealFileSystemService
from vistadeploy.exceptions import ConfigError
from vistadeploy.utils.config import DeployConfig, add_common_arguments, config_from_args
from vistadeploy.utils.locator import ArtifactLocator


def check_package(config: DeployConfig, locator: ArtifactLocator) -> int:
    """Report the IPK that deploy would ship; 0 if found, 1 otherwise."""
    matches = locator.find_all(config.ipk_dir, config.artifact_pattern)
    if not matches:
        print(f"✗ IPK not found under {config.ipk_dir}. Run 'vistadeploy package'")
        return 1

    print(f"✓ IPK package found: {matches[0]}")
    if len(matches) > 1:
        print(f"  ({len(matches) - 1} other match(es) ignored, selected by {locator.order})")
    return 0


def setup_parser(parser):
    """Setup argument parser for check-package command"""
    add_common_arguments(parser)


def execute(args):
    """Execute check-package command"""
    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    locator = ArtifactLocator(RealFileSystemService(), order=config.artifact_order)
    return check_package(config, locator)
