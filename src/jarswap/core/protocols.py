"""Protocol definitions for dependency injection.

Every external dependency of the swap engine (filesystem, archive format,
subprocess, configuration files, console output) is reached through one of
these Protocols. Production code wires in the implementations from
``jarswap.core.implementations``; tests pass ``Mock(spec=...)`` objects or
small fakes instead.
"""

from typing import Protocol, Dict, Any, Optional, List, Union, Iterator
from pathlib import Path


class Logger(Protocol):
    """Abstraction for operator-facing output.

    Replaces direct print() statements throughout the codebase.
    """

    def info(self, message: str) -> None:
        """Log informational message."""
        ...

    def progress(self, message: str) -> None:
        """Log a progress line on the diagnostic stream, unprefixed."""
        ...

    def warning(self, message: str) -> None:
        """Log warning message."""
        ...

    def error(self, message: str) -> None:
        """Log error message."""
        ...

    def debug(self, message: str) -> None:
        """Log debug message (only shown in verbose mode)."""
        ...


class FileSystemService(Protocol):
    """Abstraction for filesystem operations.

    Covers everything the stager, merger and restore manager do to files,
    so that the destination-side state machine can be unit tested without
    touching disk.
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

    def mkdir(self, path: Union[str, Path], parents: bool = True, exist_ok: bool = True) -> None:
        """Create directory (with parents if specified)."""
        ...

    def rmtree(self, path: Union[str, Path]) -> None:
        """Recursively remove directory tree."""
        ...

    def remove(self, path: Union[str, Path]) -> None:
        """Remove a single file."""
        ...

    def rmdir(self, path: Union[str, Path]) -> None:
        """Remove an empty directory; fails if it has entries."""
        ...

    def iterdir(self, path: Union[str, Path]) -> Iterator[Path]:
        """Iterate over directory contents."""
        ...

    def copy_file(self, src: Union[str, Path], dst: Union[str, Path]) -> None:
        """Copy file bytes and metadata from src to dst."""
        ...

    def copy_tree(self, src: Union[str, Path], dst: Union[str, Path]) -> None:
        """Copy a directory tree onto dst, overwriting colliding files."""
        ...

    def replace(self, src: Union[str, Path], dst: Union[str, Path]) -> None:
        """Atomically rename src onto dst."""
        ...

    def make_user_writable(self, path: Union[str, Path]) -> None:
        """Recursively grant the owner read/write access (chmod -R u+rw)."""
        ...


class ArchiveCodec(Protocol):
    """Abstraction for the archive format.

    Treated as a lossless, order-independent round trip over the entry set.
    """

    def pack(self, directory: Union[str, Path], archive_path: Union[str, Path]) -> int:
        """Pack every file under directory into archive_path. Returns entry count."""
        ...

    def unpack(self, archive_path: Union[str, Path], directory: Union[str, Path]) -> int:
        """Unpack archive_path into directory. Returns entry count."""
        ...


class ProcessResult(Protocol):
    """Result of a completed process."""

    returncode: int
    stdout: str
    stderr: str


class ProcessExecutor(Protocol):
    """Abstraction for process execution.

    Wraps subprocess.run to enable testing without spawning ssh/scp.
    """

    def run(
        self,
        cmd: List[str],
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None
    ) -> ProcessResult:
        """Run command to completion and return its captured result."""
        ...


class ConfigLoader(Protocol):
    """Abstraction for configuration file loading."""

    def load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file and return parsed dictionary."""
        ...
