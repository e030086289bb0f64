"""Local build stages: web UI bundle, IPK package, full image

Each stage wraps an opaque external tool. Preconditions are checked before
the tool runs and postconditions after it exits; a tool that exits 0 without
producing its output still fails the stage.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from vistadeploy.core.protocols import (
    FileSystemService,
    Logger,
    ProcessExecutor,
    ProcessResult,
    ToolLocator,
)
from vistadeploy.exceptions import (
    ConfigError,
    OutputMissingError,
    ToolchainUnavailableError,
    ToolFailedError,
    ToolMissingError,
)
from vistadeploy.utils.config import DeployConfig
from vistadeploy.utils.locator import ArtifactLocator

PACKAGING_TOOL = 'kas'
IMAGE_BUILD_SCRIPT = 'kas-build.sh'
IMAGE_FALLBACK = 'vistadeploy image'


@dataclass(frozen=True)
class BuildTarget:
    """
    A buildable unit driven by a script in its source directory.

    Attributes:
        name: Display name ("Web UI")
        source_dir: Directory the script runs in
        script: Script file name relative to source_dir
        output_dir: Directory the script must produce
        marker: File inside output_dir whose presence means success
        required_subdirs: Extra directories inside output_dir that must exist
    """
    name: str
    source_dir: Path
    script: str
    output_dir: Path
    marker: str
    required_subdirs: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def script_path(self) -> Path:
        return Path(self.source_dir) / self.script

    @property
    def marker_path(self) -> Path:
        return Path(self.output_dir) / self.marker


def webui_target(config: DeployConfig) -> BuildTarget:
    """The React web UI: build.sh -> dist/index.html"""
    return BuildTarget(
        name="Web UI",
        source_dir=Path(config.webui_dir),
        script="build.sh",
        output_dir=config.webui_dist,
        marker="index.html",
    )


class StageRunner:
    """Runs a BuildTarget's script and verifies its output."""

    def __init__(
        self,
        filesystem: FileSystemService,
        process_executor: ProcessExecutor,
        logger: Logger,
        verbose: bool = False
    ):
        self.fs = filesystem
        self.process = process_executor
        self.log = logger
        self.verbose = verbose

    def missing_outputs(self, target: BuildTarget) -> List[Path]:
        """Outputs of target that do not exist yet (empty list means built)."""
        missing = []
        if not self.fs.is_dir(target.output_dir):
            missing.append(Path(target.output_dir))
        if not self.fs.is_file(target.marker_path):
            missing.append(target.marker_path)
        for subdir in target.required_subdirs:
            path = Path(target.output_dir) / subdir
            if not self.fs.is_dir(path):
                missing.append(path)
        return missing

    def run(self, target: BuildTarget) -> ProcessResult:
        """
        Run the target's script in its source directory.

        Raises:
            ToolMissingError: Script does not exist (nothing is executed)
            ToolFailedError: Script exited non-zero
            OutputMissingError: Script exited 0 but output dir or marker is missing
        """
        if not self.fs.is_file(target.script_path):
            raise ToolMissingError(target.script_path)

        self.log.info(f"Building {target.name}...")
        result = self.process.run(
            [f"./{target.script}"],
            cwd=str(target.source_dir),
            capture_output=not self.verbose
        )

        if not result.ok:
            raise ToolFailedError(result.returncode, tool=target.script, details=result.tail())

        missing = self.missing_outputs(target)
        if missing:
            raise OutputMissingError(
                missing[0],
                hint=f"{target.name} build failed - {target.output_dir} or {target.marker} not found"
            )

        self.log.info(f"✓ {target.name} built successfully: {target.output_dir}")
        return result


class PackageStage:
    """Builds the IPK with bitbake inside a kas shell and returns its path."""

    def __init__(
        self,
        config: DeployConfig,
        filesystem: FileSystemService,
        process_executor: ProcessExecutor,
        tool_locator: ToolLocator,
        locator: ArtifactLocator,
        logger: Logger,
        verbose: bool = False
    ):
        self.config = config
        self.fs = filesystem
        self.process = process_executor
        self.tools = tool_locator
        self.locator = locator
        self.log = logger
        self.verbose = verbose

    def locate(self):
        """Current IPK in the deploy tree, or None."""
        return self.locator.find(self.config.ipk_dir, self.config.artifact_pattern)

    def run(self) -> Path:
        """
        Raises:
            OutputMissingError: Web UI not built, or no IPK after bitbake
            ToolchainUnavailableError: kas is not on PATH
            ToolFailedError: kas/bitbake exited non-zero
        """
        if not self.fs.is_dir(self.config.webui_dist):
            raise OutputMissingError(
                self.config.webui_dist,
                hint="Web UI not built. Run 'vistadeploy build' first."
            )

        if not self.tools.has_tool(PACKAGING_TOOL):
            raise ToolchainUnavailableError(PACKAGING_TOOL, fallback=IMAGE_FALLBACK)

        self.log.info("Building IPK package with bitbake...")
        result = self.process.run(
            [PACKAGING_TOOL, 'shell', self.config.kas_file, '-c', f"bitbake {self.config.recipe}"],
            capture_output=not self.verbose
        )
        if not result.ok:
            raise ToolFailedError(result.returncode, tool='bitbake', details=result.tail())

        artifact = self.locate()
        if artifact is None:
            raise OutputMissingError(
                self.config.ipk_dir / self.config.artifact_pattern,
                hint="IPK not found - check build output"
            )

        self.log.info(f"Package build complete. IPK location:\n  {artifact}")
        return artifact


class ImageStage:
    """Full Yocto image via kas-build.sh (which validates its own secrets)."""

    def __init__(
        self,
        config: DeployConfig,
        filesystem: FileSystemService,
        process_executor: ProcessExecutor,
        logger: Logger,
        verbose: bool = False
    ):
        self.config = config
        self.fs = filesystem
        self.process = process_executor
        self.log = logger
        self.verbose = verbose

    def run(self) -> Path:
        if not self.fs.is_file(self.config.kas_file):
            raise ConfigError(f"KAS file not found: {self.config.kas_file}")
        if not self.fs.is_file(IMAGE_BUILD_SCRIPT):
            raise ToolMissingError(Path(IMAGE_BUILD_SCRIPT))

        self.log.info(f"Using KAS file: {self.config.kas_file}")
        self.log.info(f"Build directory: {self.config.build_dir}")
        result = self.process.run(
            [f"./{IMAGE_BUILD_SCRIPT}", 'build', self.config.kas_file],
            capture_output=not self.verbose
        )
        if not result.ok:
            raise ToolFailedError(result.returncode, tool=IMAGE_BUILD_SCRIPT, details=result.tail())

        if not self.fs.is_dir(self.config.images_dir):
            raise OutputMissingError(self.config.images_dir)

        self.log.info(f"Image build complete. Artifacts in: {self.config.images_dir}/")
        return self.config.images_dir
