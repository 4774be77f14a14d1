"""Core dependency injection infrastructure for jarswap.

All external dependencies (filesystem, archive format, subprocess, config
files, console) are abstracted via Protocols with production implementations.
"""

from jarswap.core.protocols import (
    Logger,
    FileSystemService,
    ArchiveCodec,
    ProcessExecutor,
    ProcessResult,
    ConfigLoader,
)

from jarswap.core.implementations import (
    ConsoleLogger,
    RealFileSystemService,
    ZipArchiveCodec,
    SubprocessExecutor,
    YamlConfigLoader,
)

__all__ = [
    # Protocols
    "Logger",
    "FileSystemService",
    "ArchiveCodec",
    "ProcessExecutor",
    "ProcessResult",
    "ConfigLoader",
    # Implementations
    "ConsoleLogger",
    "RealFileSystemService",
    "ZipArchiveCodec",
    "SubprocessExecutor",
    "YamlConfigLoader",
]
