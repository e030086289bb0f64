"""Core dependency injection infrastructure for vistadeploy.

This module provides Protocol-based abstractions that keep every external
dependency of the pipeline (filesystem, subprocess, environment, tool lookup,
config files) behind an injectable interface with a production implementation.

Design:
- Protocol-based abstractions (typing.Protocol) for structural typing
- Production implementations for real-world use
- Easy mocking for unit tests
"""

from vistadeploy.core.protocols import (
    Logger,
    FileSystemService,
    ProcessExecutor,
    ProcessResult,
    EnvironmentProvider,
    ToolLocator,
    ConfigLoader,
)

from vistadeploy.core.implementations import (
    ConsoleLogger,
    RealFileSystemService,
    SubprocessExecutor,
    SystemEnvironmentProvider,
    SystemToolLocator,
    YamlConfigLoader,
)

__all__ = [
    # Protocols
    "Logger",
    "FileSystemService",
    "ProcessExecutor",
    "ProcessResult",
    "EnvironmentProvider",
    "ToolLocator",
    "ConfigLoader",
    # Implementations
    "ConsoleLogger",
    "RealFileSystemService",
    "SubprocessExecutor",
    "SystemEnvironmentProvider",
    "SystemToolLocator",
    "YamlConfigLoader",
]
