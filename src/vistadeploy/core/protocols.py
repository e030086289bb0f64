"""Protocol definitions for dependency injection.

This module defines Protocol-based abstractions for all external dependencies
of the deployment pipeline. Protocols use structural typing, so any class
implementing these methods satisfies the Protocol without explicit inheritance.

Benefits:
- Easy to mock in tests (just implement the methods)
- No inheritance required
- Clear interface contracts
"""

from dataclasses import dataclass
from typing import Protocol, Dict, Any, Optional, List, Union, Iterator
from pathlib import Path


class Logger(Protocol):
    """Abstraction for logging operations.

    Replaces direct print() statements in pipeline components.
    """

    def info(self, message: str) -> None:
        """Log informational message."""
        ...

    def warning(self, message: str) -> None:
        """Log warning message."""
        ...

    def error(self, message: str) -> None:
        """Log error message."""
        ...

    def debug(self, message: str) -> None:
        """Log debug message."""
        ...


class FileSystemService(Protocol):
    """Abstraction for filesystem operations.

    Wraps Path and shutil operations so stages and the locator can be
    tested without a real build tree.
    """

    def exists(self, path: Union[str, Path]) -> bool:
        """Check if path exists."""
        ...

    def is_file(self, path: Union[str, Path]) -> bool:
        """Check if path is a file."""
        ...

    def is_dir(self, path: Union[str, Path]) -> bool:
        """Check if path is a directory."""
        ...

    def rmtree(self, path: Union[str, Path]) -> None:
        """Recursively remove directory tree."""
        ...

    def rglob(self, path: Union[str, Path], pattern: str) -> List[Path]:
        """Find all files below path whose name matches glob pattern."""
        ...

    def iterdir(self, path: Union[str, Path]) -> Iterator[Path]:
        """Iterate over directory contents."""
        ...

    def mtime(self, path: Union[str, Path]) -> float:
        """Return modification time of path."""
        ...

    def read_file(self, path: Union[str, Path]) -> str:
        """Read entire file as string."""
        ...


@dataclass
class ProcessResult:
    """
    Structured result of a finished subprocess.

    Attributes:
        cmd: Command that was executed
        returncode: Exit status (127 if the executable could not be started)
        stdout: Captured standard output ("" when not captured)
        stderr: Captured standard error ("" when not captured)
    """
    cmd: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def tail(self, lines: int = 20) -> str:
        """Last lines of stderr (falling back to stdout) for error messages."""
        output = self.stderr.strip() or self.stdout.strip()
        return "\n".join(output.splitlines()[-lines:])


class ProcessExecutor(Protocol):
    """Abstraction for process execution.

    Wraps subprocess.run to enable testing without spawning real processes.
    """

    def run(
        self,
        cmd: List[str],
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        capture_output: bool = True
    ) -> ProcessResult:
        """Execute command to completion and return its result."""
        ...


class EnvironmentProvider(Protocol):
    """Abstraction for environment access.

    Wraps os.environ so configuration resolution is testable.
    """

    def get_environ(self) -> Dict[str, str]:
        """Get copy of environment variables."""
        ...


class ToolLocator(Protocol):
    """Abstraction for external tool discovery.

    Wraps shutil.which() to enable testing without requiring
    tools to be installed (kas, docker, scp, ...).
    """

    def find_tool(self, tool_name: str) -> Optional[str]:
        """Find tool in PATH and return absolute path, or None if not found."""
        ...

    def has_tool(self, tool_name: str) -> bool:
        """Check if tool exists in PATH."""
        ...


class ConfigLoader(Protocol):
    """Abstraction for configuration file loading.

    Wraps YAML loading to enable testing with mock configurations
    without requiring actual config files.
    """

    def load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file and return parsed dictionary."""
        ...
