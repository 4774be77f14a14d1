"""Destination-side staging area.

All paths the merger and restore manager touch at the destination are
derived here, keyed by the destination jar's name. This is also the only
place that knows where the pristine backup lives and when it may be written.

Layout for ``<target_dir>/app.jar`` with the default working dir name::

    <target_dir>/app.jar                    destination jar
    <target_dir>/app.swap.zip               overlay as delivered by a transport
    <target_dir>/.jar-swap/app.orig.jar     pristine backup
    <target_dir>/.jar-swap/app.orig.jar.tmp backup being copied
    <target_dir>/.jar-swap/app.swap.zip     overlay, moved out of the target dir
    <target_dir>/.jar-swap/app.swap/        unpacked overlay
    <target_dir>/.jar-swap/app.swapped/     unpacked backup, merged with overlay
    <target_dir>/.jar-swap/app.repack.jar   repacked jar before the atomic rename
    <target_dir>/.jar-swap/app.lock         run lock, removed last by restore
"""

import errno
import fcntl
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Union

from jarswap.core.protocols import FileSystemService
from jarswap.exceptions import ConcurrentSwapError

DEFAULT_WORKING_DIR_NAME = '.jar-swap'


def archive_stem(archive_name: str) -> str:
    """Jar name without its .jar extension."""
    return archive_name[:-len('.jar')] if archive_name.endswith('.jar') else archive_name


def overlay_archive_name(archive_name: str) -> str:
    """Name of the overlay archive built for archive_name."""
    return f"{archive_stem(archive_name)}.swap.zip"


class DestinationStagingArea:
    """Path namespace and pristine backup for one destination jar."""

    def __init__(
        self,
        target_dir: Union[str, Path],
        archive_name: str,
        filesystem: FileSystemService,
        working_dir_name: str = DEFAULT_WORKING_DIR_NAME
    ):
        self.target_dir = Path(target_dir)
        self.archive_name = archive_name
        self.stem = archive_stem(archive_name)
        self.fs = filesystem
        self.working_dir = self.target_dir / working_dir_name

    @property
    def target_archive(self) -> Path:
        return self.target_dir / self.archive_name

    @property
    def delivered_overlay(self) -> Path:
        return self.target_dir / overlay_archive_name(self.archive_name)

    @property
    def overlay_archive(self) -> Path:
        return self.working_dir / overlay_archive_name(self.archive_name)

    @property
    def backup_path(self) -> Path:
        return self.working_dir / f"{self.stem}.orig.jar"

    @property
    def backup_tmp_path(self) -> Path:
        return self.working_dir / f"{self.stem}.orig.jar.tmp"

    @property
    def overlay_dir(self) -> Path:
        return self.working_dir / f"{self.stem}.swap"

    @property
    def merged_dir(self) -> Path:
        return self.working_dir / f"{self.stem}.swapped"

    @property
    def repack_path(self) -> Path:
        return self.working_dir / f"{self.stem}.repack.jar"

    @property
    def lock_path(self) -> Path:
        return self.working_dir / f"{self.stem}.lock"

    def owned_paths(self) -> List[Path]:
        """Every staging path belonging to this jar, backup and lock excluded."""
        return [
            self.delivered_overlay,
            self.overlay_archive,
            self.overlay_dir,
            self.merged_dir,
            self.repack_path,
            self.backup_tmp_path,
        ]

    def backup_exists(self) -> bool:
        return self.fs.is_file(self.backup_path)

    def ensure_backup(self) -> bool:
        """Copy the destination jar to the backup slot unless a backup exists.

        An existing backup is never overwritten, so every patch run applies to
        the jar as it was before the first one.

        Returns:
            True if the backup was created by this call
        """
        if self.backup_exists():
            return False
        self.fs.mkdir(self.working_dir)
        # The backup slot only ever holds a complete copy.
        if self.fs.exists(self.backup_tmp_path):
            self.fs.remove(self.backup_tmp_path)
        self.fs.copy_file(self.target_archive, self.backup_tmp_path)
        self.fs.replace(self.backup_tmp_path, self.backup_path)
        return True

    def reset_dir(self, path: Path) -> None:
        """Remove path if present and recreate it empty."""
        if self.fs.exists(path):
            self.fs.rmtree(path)
        self.fs.mkdir(path)

    def discard(self) -> List[Path]:
        """Delete all staging remnants for this jar.

        Called with the lock held. The lock file goes last, and the working
        directory itself is removed only when nothing else is left in it
        (other jars, or a run that started meanwhile, may share it).

        Returns:
            Paths that were removed
        """
        removed = []
        for path in [*self.owned_paths(), self.lock_path]:
            if self.fs.is_dir(path):
                self.fs.rmtree(path)
                removed.append(path)
            elif self.fs.exists(path):
                self.fs.remove(path)
                removed.append(path)

        try:
            self.fs.rmdir(self.working_dir)
        except OSError as e:
            if e.errno not in (errno.ENOTEMPTY, errno.EEXIST, errno.ENOENT):
                raise
        else:
            removed.append(self.working_dir)
        return removed

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Hold an exclusive lock on this jar's staging area.

        Uses flock(), so a killed holder releases the lock automatically.
        A holder may unlink the lock file before releasing it (see discard),
        so a lock taken on a file that is no longer at lock_path is dropped
        and taken again on the current one.

        Raises:
            ConcurrentSwapError: If another run holds the lock
        """
        while True:
            self.fs.mkdir(self.working_dir)
            try:
                fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, 0o644)
            except FileNotFoundError:
                # working dir removed by a finishing restore
                continue
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError as e:
                os.close(fd)
                raise ConcurrentSwapError(
                    f"Another jarswap run is working on {self.target_archive} "
                    f"(lock held on {self.lock_path})"
                ) from e
            if self._holds_current_lock_file(fd):
                break
            os.close(fd)
        try:
            yield
        finally:
            os.close(fd)

    def _holds_current_lock_file(self, fd: int) -> bool:
        try:
            current = os.stat(self.lock_path)
        except FileNotFoundError:
            return False
        held = os.fstat(fd)
        return (held.st_dev, held.st_ino) == (current.st_dev, current.st_ino)
