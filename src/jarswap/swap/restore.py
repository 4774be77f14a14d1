"""Put the pristine backup back in place of a patched jar."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from jarswap.core.protocols import Logger
from jarswap.exceptions import RestoreError
from jarswap.swap.staging import DestinationStagingArea

NOTHING_TO_RESTORE = "Nothing to restore."


@dataclass
class RestoreResult:
    """
    Outcome of a restore.

    Attributes:
        restored: False when there was no backup (still a success)
        message: Operator-facing summary
        removed: Staging paths deleted along the way
    """
    restored: bool
    message: str
    removed: List[Path] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return True


class RestoreManager:
    """
    Restores a destination jar from its pristine backup.

    Idempotent: once the backup has been moved back, further calls report
    "Nothing to restore." and touch nothing.
    """

    def __init__(self, staging: DestinationStagingArea, logger: Logger):
        self.staging = staging
        self.log = logger

    def restore(self) -> RestoreResult:
        """
        Move the backup over the destination jar and discard staging state.

        Raises:
            RestoreError: If a backup exists but could not be moved back
            ConcurrentSwapError: If another run holds the staging lock
        """
        s = self.staging
        if not s.backup_exists():
            self.log.info(NOTHING_TO_RESTORE)
            return RestoreResult(restored=False, message=NOTHING_TO_RESTORE)

        self.log.debug(f"Attempting to restore jar at {s.target_archive}...")
        with s.lock():
            try:
                s.fs.replace(s.backup_path, s.target_archive)
            except OSError as e:
                raise RestoreError(f"Could not move {s.backup_path} to {s.target_archive}: {e}") from e
            try:
                removed = s.discard()
            except OSError as e:
                raise RestoreError(f"Restored {s.target_archive} but could not clean up {s.working_dir}: {e}") from e

        message = f"Restored {s.target_archive} from pristine backup."
        self.log.info(message)
        return RestoreResult(restored=True, message=message, removed=removed)
