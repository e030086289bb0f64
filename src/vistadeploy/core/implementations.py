"""Production implementations of dependency injection protocols.

This module provides real implementations that wrap actual external dependencies
(filesystem, subprocess, environment, etc.). These are used in production code.

For testing, use mocks or test doubles instead of these implementations.
"""

import logging
import os
import shutil
import subprocess
import sys
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union, Iterator

from vistadeploy.core.protocols import ProcessResult

logger = logging.getLogger(__name__)


class ConsoleLogger:
    """Production logger that prints to console (stdout/stderr)."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def info(self, message: str) -> None:
        """Print info message to stdout."""
        print(message)

    def warning(self, message: str) -> None:
        """Print warning message to stdout."""
        print(f"Warning: {message}")

    def error(self, message: str) -> None:
        """Print error message to stderr."""
        print(f"Error: {message}", file=sys.stderr)

    def debug(self, message: str) -> None:
        """Print debug message to stdout (only in verbose mode)."""
        if self.verbose:
            print(f"Debug: {message}")


class RealFileSystemService:
    """Production filesystem service using real pathlib and shutil operations."""

    def exists(self, path: Union[str, Path]) -> bool:
        return Path(path).exists()

    def is_file(self, path: Union[str, Path]) -> bool:
        return Path(path).is_file()

    def is_dir(self, path: Union[str, Path]) -> bool:
        return Path(path).is_dir()

    def rmtree(self, path: Union[str, Path]) -> None:
        shutil.rmtree(path)

    def rglob(self, path: Union[str, Path], pattern: str) -> List[Path]:
        return [p for p in Path(path).rglob(pattern) if p.is_file()]

    def iterdir(self, path: Union[str, Path]) -> Iterator[Path]:
        return Path(path).iterdir()

    def mtime(self, path: Union[str, Path]) -> float:
        return Path(path).stat().st_mtime

    def read_file(self, path: Union[str, Path]) -> str:
        with open(path, 'r') as f:
            return f.read()


class SubprocessExecutor:
    """Production process executor using real subprocess.run."""

    def run(
        self,
        cmd: List[str],
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        capture_output: bool = True
    ) -> ProcessResult:
        """Execute command and block until it exits."""
        logger.debug("exec %s (cwd=%s)", ' '.join(cmd), cwd or '.')
        try:
            completed = subprocess.run(
                cmd,
                cwd=cwd,
                env=env,
                capture_output=capture_output,
                text=True
            )
        except FileNotFoundError as e:
            # Executable not installed; report like a shell would
            return ProcessResult(cmd=list(cmd), returncode=127, stderr=str(e))
        except OSError as e:
            # Present but not executable (or otherwise unrunnable)
            return ProcessResult(cmd=list(cmd), returncode=126, stderr=str(e))

        return ProcessResult(
            cmd=list(cmd),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or ""
        )


class SystemEnvironmentProvider:
    """Production environment provider using real os.environ."""

    def get_environ(self) -> Dict[str, str]:
        """Get copy of environment variables."""
        return dict(os.environ)


class SystemToolLocator:
    """Production tool locator using real shutil.which."""

    def find_tool(self, tool_name: str) -> Optional[str]:
        """Find tool in PATH."""
        return shutil.which(tool_name)

    def has_tool(self, tool_name: str) -> bool:
        """Check if tool exists in PATH."""
        return self.find_tool(tool_name) is not None


class YamlConfigLoader:
    """Production config loader using real YAML parser."""

    def __init__(self, filesystem: 'RealFileSystemService'):
        """Initialize with filesystem service for reading files."""
        self.fs = filesystem

    def load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file and return parsed dictionary (empty file -> {})."""
        content = self.fs.read_file(path)
        return yaml.safe_load(content) or {}
