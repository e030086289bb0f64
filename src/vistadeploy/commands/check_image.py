"""Check whether the Yocto image has been built"""
from vistadeploy.core import FileSystemService, RealFileSystemService
from vistadeploy.exceptions import ConfigError
from vistadeploy.utils.config import DeployConfig, add_common_arguments, config_from_args


def check_image(config: DeployConfig, filesystem: FileSystemService, limit: int = 5) -> int:
    images = config.images_dir
    if not filesystem.is_dir(images):
        print("✗ Image not built. Run 'vistadeploy image'")
        return 1

    print("✓ Image build directory exists")
    for entry in sorted(filesystem.iterdir(images))[:limit]:
        print(f"  {entry.name}")
    return 0


def setup_parser(parser):
    """Setup argument parser for check-image command"""
    add_common_arguments(parser)


def execute(args):
    """Execute check-image command"""
    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    return check_image(config, RealFileSystemService())
