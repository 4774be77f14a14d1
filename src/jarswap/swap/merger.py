"""Destination-side merge of an overlay onto the pristine backup.

State machine, one execution per patch run::

    START → ENSURE_BACKUP → UNPACK_BOTH → OVERLAY_MERGE → REPACK → DONE
                 └──────────────┴──────────────┴────────────┴──→ FAILED

FAILED is terminal and nothing is rolled back. A failure after the backup or
unpack steps can leave the staging directories half populated; the next run
clears them unconditionally before using them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from jarswap.core.protocols import FileSystemService, ArchiveCodec, Logger
from jarswap.exceptions import RemoteMergeError, SwapError
from jarswap.swap.pipeline import Pipeline, PipelineResult
from jarswap.swap.staging import DestinationStagingArea


class MergeState(str, Enum):
    START = "START"
    ENSURE_BACKUP = "ENSURE_BACKUP"
    UNPACK_BOTH = "UNPACK_BOTH"
    OVERLAY_MERGE = "OVERLAY_MERGE"
    REPACK = "REPACK"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class MergeResult:
    """
    Outcome of one merge.

    Attributes:
        state: DONE on success, FAILED otherwise
        failed_step: State whose step failed (None on success)
        backup_created: Whether this run created the pristine backup
        message: Error text on failure
    """
    state: MergeState
    failed_step: Optional[MergeState] = None
    backup_created: bool = False
    message: str = ""

    @property
    def success(self) -> bool:
        return self.state is MergeState.DONE


class RemoteMerger:
    """Applies a delivered overlay to the destination jar."""

    def __init__(self, staging: DestinationStagingArea, codec: ArchiveCodec, logger: Logger):
        self.staging = staging
        self.fs: FileSystemService = staging.fs
        self.codec = codec
        self.log = logger
        self.state = MergeState.START
        self._backup_created = False

    def _ensure_backup(self) -> str:
        s = self.staging
        if not self.fs.is_file(s.delivered_overlay):
            raise RemoteMergeError(f"No overlay archive delivered at {s.delivered_overlay}")
        if not s.backup_exists() and not self.fs.is_file(s.target_archive):
            raise RemoteMergeError(f"Destination jar not found: {s.target_archive}")

        self.fs.mkdir(s.working_dir)
        self.fs.replace(s.delivered_overlay, s.overlay_archive)

        self._backup_created = s.ensure_backup()
        if self._backup_created:
            return f"backed up {s.archive_name} to {s.backup_path}"
        return f"keeping existing backup {s.backup_path}"

    def _unpack_both(self) -> str:
        s = self.staging
        s.reset_dir(s.overlay_dir)
        overlay_count = self.codec.unpack(s.overlay_archive, s.overlay_dir)
        s.reset_dir(s.merged_dir)
        base_count = self.codec.unpack(s.backup_path, s.merged_dir)
        return f"{overlay_count} overlay entries, {base_count} base entries"

    def _overlay_merge(self) -> None:
        s = self.staging
        # original packaging may have produced read-only entries
        self.fs.make_user_writable(s.merged_dir)
        self.fs.copy_tree(s.overlay_dir, s.merged_dir)
        self.fs.make_user_writable(s.merged_dir)

    def _repack(self) -> str:
        s = self.staging
        if self.fs.exists(s.repack_path):
            self.fs.remove(s.repack_path)
        count = self.codec.pack(s.merged_dir, s.repack_path)
        self.fs.replace(s.repack_path, s.target_archive)
        return f"wrote {count} entries to {s.target_archive}"

    def _step(self, state: MergeState, action):
        def run():
            self.state = state
            return action()
        return run

    def merge(self) -> MergeResult:
        """Run the state machine under the staging area lock."""
        self.state = MergeState.START
        self._backup_created = False
        self.log.debug(f"Swapping classes in {self.staging.target_archive}...")

        try:
            with self.staging.lock():
                pipeline = (
                    Pipeline("merge", self.log)
                    .add(MergeState.ENSURE_BACKUP.value, self._step(MergeState.ENSURE_BACKUP, self._ensure_backup))
                    .add(MergeState.UNPACK_BOTH.value, self._step(MergeState.UNPACK_BOTH, self._unpack_both))
                    .add(MergeState.OVERLAY_MERGE.value, self._step(MergeState.OVERLAY_MERGE, self._overlay_merge))
                    .add(MergeState.REPACK.value, self._step(MergeState.REPACK, self._repack))
                )
                outcome: PipelineResult = pipeline.run()
        except (SwapError, OSError) as e:
            self.log.error(str(e))
            self.state = MergeState.FAILED
            return MergeResult(state=MergeState.FAILED, failed_step=MergeState.START, message=str(e))

        if not outcome.success:
            failed_step = self.state
            self.state = MergeState.FAILED
            return MergeResult(
                state=MergeState.FAILED,
                failed_step=failed_step,
                backup_created=self._backup_created,
                message=outcome.failed_stage.message
            )

        for stage in outcome.stages:
            if stage.message:
                self.log.debug(f"{stage.name}: {stage.message}")
        self.state = MergeState.DONE
        return MergeResult(state=MergeState.DONE, backup_created=self._backup_created)
