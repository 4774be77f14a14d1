"""Production implementations of dependency injection protocols.

This module provides real implementations that wrap actual external dependencies
(filesystem, zip archives, subprocess, YAML). These are used in production code.

For testing, use mocks or test doubles instead of these implementations.
"""

import logging
import os
import shutil
import stat
import subprocess
import sys
import zipfile
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union, Iterator

from jarswap.exceptions import ArchiveError

logger = logging.getLogger(__name__)

MANIFEST_ENTRY = "META-INF/MANIFEST.MF"


class ConsoleLogger:
    """Production logger that prints to console (stdout/stderr).

    Debug messages are dropped unless verbose is set.
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def info(self, message: str) -> None:
        """Print info message to stdout."""
        print(message)

    def progress(self, message: str) -> None:
        """Print progress message to stderr."""
        print(message, file=sys.stderr)

    def warning(self, message: str) -> None:
        """Print warning message to stdout."""
        print(f"Warning: {message}")

    def error(self, message: str) -> None:
        """Print error message to stderr."""
        print(f"Error: {message}", file=sys.stderr)

    def debug(self, message: str) -> None:
        """Print debug message to stdout when verbose."""
        if self.verbose:
            print(f"Debug: {message}")


class RealFileSystemService:
    """Production filesystem service using real pathlib and shutil operations."""

    def exists(self, path: Union[str, Path]) -> bool:
        """Check if path exists."""
        return Path(path).exists()

    def is_file(self, path: Union[str, Path]) -> bool:
        """Check if path is a file."""
        return Path(path).is_file()

    def is_dir(self, path: Union[str, Path]) -> bool:
        """Check if path is a directory."""
        return Path(path).is_dir()

    def mkdir(self, path: Union[str, Path], parents: bool = True, exist_ok: bool = True) -> None:
        """Create directory."""
        Path(path).mkdir(parents=parents, exist_ok=exist_ok)

    def rmtree(self, path: Union[str, Path]) -> None:
        """Recursively remove directory tree."""
        shutil.rmtree(path)

    def remove(self, path: Union[str, Path]) -> None:
        """Remove a single file."""
        Path(path).unlink()

    def rmdir(self, path: Union[str, Path]) -> None:
        """Remove an empty directory."""
        Path(path).rmdir()

    def iterdir(self, path: Union[str, Path]) -> Iterator[Path]:
        """Iterate over directory contents."""
        return Path(path).iterdir()

    def copy_file(self, src: Union[str, Path], dst: Union[str, Path]) -> None:
        """Copy file bytes and metadata."""
        shutil.copy2(src, dst)

    def copy_tree(self, src: Union[str, Path], dst: Union[str, Path]) -> None:
        """Copy tree onto dst (union, overwrite on collision)."""
        shutil.copytree(src, dst, dirs_exist_ok=True)

    def replace(self, src: Union[str, Path], dst: Union[str, Path]) -> None:
        """Atomic rename (same filesystem)."""
        os.replace(src, dst)

    def make_user_writable(self, path: Union[str, Path]) -> None:
        """chmod -R u+rw (directories also get u+x so they stay traversable)."""
        root = Path(path)
        for entry in [root, *root.rglob('*')]:
            mode = entry.stat().st_mode
            extra = stat.S_IRUSR | stat.S_IWUSR
            if entry.is_dir():
                extra |= stat.S_IXUSR
            if mode & extra != extra:
                entry.chmod(mode | extra)


class ZipArchiveCodec:
    """Archive codec for jar/zip files using the standard zipfile module."""

    def pack(self, directory: Union[str, Path], archive_path: Union[str, Path]) -> int:
        """Pack directory into a deflated zip.

        Entries are written in sorted order with the manifest first, which is
        where the JVM's JarInputStream expects to find it.
        """
        root = Path(directory)
        files = sorted(
            p.relative_to(root).as_posix() for p in root.rglob('*') if p.is_file()
        )
        if MANIFEST_ENTRY in files:
            files.remove(MANIFEST_ENTRY)
            files.insert(0, MANIFEST_ENTRY)

        try:
            with zipfile.ZipFile(archive_path, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
                for name in files:
                    zf.write(root / name, arcname=name)
        except (OSError, zipfile.LargeZipFile) as e:
            raise ArchiveError(f"Could not pack {root} into {archive_path}: {e}") from e

        logger.debug("Packed %d entries from %s into %s", len(files), root, archive_path)
        return len(files)

    def unpack(self, archive_path: Union[str, Path], directory: Union[str, Path]) -> int:
        """Extract every entry of archive_path under directory."""
        if not Path(archive_path).is_file():
            raise ArchiveError(f"Archive not found: {archive_path}")

        try:
            with zipfile.ZipFile(archive_path) as zf:
                names = zf.namelist()
                zf.extractall(directory)
        except zipfile.BadZipFile as e:
            raise ArchiveError(f"Not a valid archive: {archive_path} ({e})") from e
        except (NotImplementedError, RuntimeError) as e:
            # unsupported compression method or encrypted entries
            raise ArchiveError(f"Cannot extract {archive_path}: {e}") from e

        logger.debug("Unpacked %d entries from %s into %s", len(names), archive_path, directory)
        return len(names)


class SubprocessExecutor:
    """Production process executor using real subprocess.run."""

    def run(
        self,
        cmd: List[str],
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None
    ) -> subprocess.CompletedProcess:
        """Execute command, capture output as text and return the result."""
        return subprocess.run(
            cmd,
            cwd=cwd,
            env=env,
            capture_output=True,
            text=True,
            check=False
        )


class YamlConfigLoader:
    """Production config loader using real YAML parser."""

    def load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file and return parsed dictionary."""
        with open(path, 'r') as f:
            return yaml.safe_load(f)
