"""
Pipeline exceptions.

Custom exceptions for build, packaging and deployment failures with
actionable error messages. Every stage failure is one of these; the
Pipeline turns them into a FAILED outcome.
"""


class VistaDeployError(Exception):
    """Base class for every failure the pipeline reports."""
    pass


class ConfigError(VistaDeployError):
    """Raised when required configuration is missing or malformed."""
    pass


class MissingRequiredError(ConfigError):
    """A required configuration value is unset or empty."""

    def __init__(self, name: str, hint: str = ""):
        self.name = name
        message = f"{name} not set"
        if hint:
            message += f"\n\n{hint}"
        super().__init__(message)


class BuildError(VistaDeployError):
    """
    Raised when a local build or packaging stage fails.

    Examples:
        - build.sh not found
        - build.sh exited non-zero
        - dist/index.html missing after a "successful" build
        - kas not installed
    """
    pass


class ToolMissingError(BuildError):
    """The stage's build script/tool does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Build tool not found at {path}")


class ToolFailedError(BuildError):
    """The external tool exited with a non-zero status."""

    def __init__(self, exit_code: int, tool: str = "", details: str = ""):
        self.exit_code = exit_code
        self.tool = tool
        message = f"{tool or 'Build tool'} failed with exit code {exit_code}"
        if details:
            message += f"\n\nLast lines of output:\n{details}"
        super().__init__(message)


class OutputMissingError(BuildError):
    """The tool ran but its expected output is not there."""

    def __init__(self, path, hint: str = ""):
        self.path = path
        message = f"Expected output not found: {path}"
        if hint:
            message += f"\n{hint}"
        super().__init__(message)


class ToolchainUnavailableError(BuildError):
    """The packaging toolchain is not installed or not on PATH."""

    def __init__(self, tool: str, fallback: str = ""):
        self.tool = tool
        self.fallback = fallback
        message = f"{tool} not found. Please install {tool}"
        if fallback:
            message += f" or use '{fallback}' instead"
        super().__init__(message)


class DeployError(VistaDeployError):
    """
    Raised when deployment to the device fails.

    Examples:
        - IPK not found even after re-packaging
        - scp to the device failed
        - opkg install or service restart failed
    """
    pass


class ArtifactNotFoundError(DeployError):
    """No artifact could be located, even after one re-package attempt."""

    def __init__(self, directory, pattern: str):
        self.directory = directory
        self.pattern = pattern
        super().__init__(
            f"IPK package not found: no '{pattern}' under {directory}\n"
            f"Failed to build IPK package"
        )


class TransferFailedError(DeployError):
    """Copying the artifact to the device failed."""

    def __init__(self, cause: str, hints: str = ""):
        self.cause = cause
        message = f"Failed to copy IPK to device: {cause}"
        if hints:
            message += f"\n{hints}"
        super().__init__(message)


class InstallFailedError(DeployError):
    """Remote install or service restart failed."""

    def __init__(self, exit_code: int, details: str = ""):
        self.exit_code = exit_code
        message = f"Failed to install package on device (exit code {exit_code})"
        if details:
            message += f"\n{details}"
        super().__init__(message)
